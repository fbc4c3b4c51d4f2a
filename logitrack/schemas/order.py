from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

class OrderStatus(str, Enum):
    CHINA_STORE = "China_Store"
    CHINA_WAREHOUSE = "China_Warehouse"
    EN_ROUTE = "En_Route"
    LIBYA_WAREHOUSE = "Libya_Warehouse"
    OUT_FOR_DELIVERY = "Out_for_Delivery"
    DELIVERED = "Delivered"

STATUS_LABELS = {
    OrderStatus.CHINA_STORE: "Pending",
    OrderStatus.CHINA_WAREHOUSE: "Warehouse CN",
    OrderStatus.EN_ROUTE: "En Route",
    OrderStatus.LIBYA_WAREHOUSE: "Warehouse LY",
    OrderStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    OrderStatus.DELIVERED: "Delivered",
}

class DomainModel(BaseModel):
    # domain json is camelCase, python attributes snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class Location(DomainModel):
    lat: float
    lng: float

class Order(DomainModel):
    id: str = ""
    order_code: str = ""
    customer_name: str = ""
    customer_phone: str = ""
    customer_address: str = ""
    product_name: str = ""
    quantity: int = Field(default=1, ge=1)
    total_price: float = Field(default=0.0, ge=0)
    status: OrderStatus = OrderStatus.CHINA_STORE
    current_physical_location: str = ""
    updated_at: int = 0
    customer_location: Location | None = None
    driver_location: Location | None = None

    def to_record(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

class AppNotification(DomainModel):
    id: str
    order_code: str
    title: str = ""
    body: str = ""
    is_read: bool = False
    timestamp: int = 0

class OrderIn(DomainModel):
    """Admin form payload. Only the tracking code and customer name are mandatory."""
    id: str | None = None
    order_code: str = Field(min_length=1)
    customer_name: str = Field(min_length=1)
    customer_phone: str | None = None
    customer_address: str | None = None
    product_name: str | None = None
    quantity: int | float | str | None = None
    total_price: int | float | str | None = None
    status: OrderStatus | None = None
    current_physical_location: str | None = None
    customer_location: Location | None = None
    driver_location: Location | None = None

    @field_validator("order_code")
    @classmethod
    def upper_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("orderCode must not be blank")
        return value

    @field_validator("customer_name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("customerName must not be blank")
        return value
