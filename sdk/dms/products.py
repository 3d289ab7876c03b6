"""Product catalogue of the DMS engines."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class ProductInfo:
    """A purchasable specification of an engine."""

    product_id: str = ""
    spec_code: str = ""
    storage: str = ""
    node_num: str = ""
    ios: List[Dict] = field(default_factory=list)
    available_zones: List[str] = field(default_factory=list)
    unavailable_zones: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> "ProductInfo":
        return cls(
            product_id=data.get("product_id", ""),
            spec_code=data.get("spec_code", ""),
            storage=str(data.get("storage", "")),
            node_num=str(data.get("node_num", "")),
            ios=data.get("io") or [],
            available_zones=data.get("available_zones") or [],
            unavailable_zones=data.get("unavailable_zones") or [],
        )


@dataclass
class ProductDetail(ProductInfo):
    """Detail entry of a value; cluster layouts nest ProductInfo entries."""

    product_infos: List[ProductInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> "ProductDetail":
        info = ProductInfo.from_dict(data)
        return cls(
            **info.__dict__,
            product_infos=[
                ProductInfo.from_dict(p) for p in data.get("product_info") or []
            ],
        )


@dataclass
class ProductValue:
    """Instance type ("single" or "cluster") and its details."""

    name: str
    details: List[ProductDetail] = field(default_factory=list)


@dataclass
class Product:
    """Engine version entry of the catalogue."""

    name: str
    version: str
    values: List[ProductValue] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> "Product":
        return cls(
            name=data.get("name", ""),
            version=data.get("version", ""),
            values=[
                ProductValue(
                    name=v.get("name", ""),
                    details=[ProductDetail.from_dict(d) for d in v.get("detail") or []],
                )
                for v in data.get("values") or []
            ],
        )


@dataclass
class GetResponse:
    hourly: List[Product] = field(default_factory=list)
    monthly: List[Product] = field(default_factory=list)


def get_url(c):
    return c.service_url("products")


def get(client, engine: str) -> GetResponse:
    """Query the product catalogue of an engine (kafka, rabbitmq)."""
    body = client.get(get_url(client), params={"engine": engine})
    return GetResponse(
        hourly=[Product.from_dict(p) for p in body.get("Hourly") or []],
        monthly=[Product.from_dict(p) for p in body.get("Monthly") or []],
    )
