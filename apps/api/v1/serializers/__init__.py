# API Serializers
from .items import ItemSerializer, ItemLookupSerializer
from .warehousing import LocationSerializer, BinSerializer, StockLevelSerializer
from .stock_counts import (
    StockCountItemSerializer, StockCountListSerializer, StockCountDetailSerializer,
    StockCountCreateSerializer, StockCountFromBinSerializer, AddItemsSerializer,
    SaveCountsSerializer, ReviewSerializer, StockCountStatsSerializer, CounterStatsSerializer,
)
