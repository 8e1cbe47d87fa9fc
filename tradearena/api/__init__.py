from .routes import router, feed_router

__all__ = ["router", "feed_router"]
