from .router import detail_router, router

__all__ = ["detail_router", "router"]
