"""Routes package for the flower catalog."""


def register_routes(app):
    """Register all route blueprints with the application."""
    from .flowers import flowers_bp, shared_bp
    from .ai import ai_bp
    from .view import view_bp
    from .settings import settings_bp

    app.register_blueprint(flowers_bp, url_prefix='/api/flowers')
    app.register_blueprint(shared_bp, url_prefix='/api/shared')
    app.register_blueprint(ai_bp, url_prefix='/api/ai')
    app.register_blueprint(view_bp, url_prefix='/api/view')
    app.register_blueprint(settings_bp, url_prefix='/api/settings')
