# API Views
from .items import ItemViewSet
from .warehousing import LocationViewSet, BinViewSet
from .stock_counts import StockCountViewSet
