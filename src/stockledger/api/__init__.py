from stockledger.api.errors import register_error_handlers
from stockledger.api.routes import stock_router

__all__ = ["stock_router", "register_error_handlers"]
