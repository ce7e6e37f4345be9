from src.service.shopping_cart.app.interface.i_broadcast_notifier import IBroadcastNotifier
from src.service.shopping_cart.app.interface.i_connection_registry import IConnectionRegistry
from src.service.shopping_cart.app.interface.i_inventory_query_repo import IInventoryQueryRepo

__all__ = ['IBroadcastNotifier', 'IConnectionRegistry', 'IInventoryQueryRepo']
