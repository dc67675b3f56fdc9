# sweeper/scans/__init__.py
"""
HTTP surface for the sweep: trigger a scan, read or stream its log.

Blueprint registration:
    from .scans import scans_bp
    app.register_blueprint(scans_bp)
"""

from .routes import scans_bp

__all__ = ["scans_bp"]
