# app/services/shipment_keys.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from app.models.enums import ContainerType, ShipmentType


@dataclass(frozen=True)
class FclKey:
    container_type: ContainerType

    shipment_type = ShipmentType.FCL


@dataclass(frozen=True)
class FclPartialKey:
    shipment_type = ShipmentType.FCL_PARTIAL


@dataclass(frozen=True)
class LclKey:
    shipment_type = ShipmentType.LCL


ShipmentKey = Union[FclKey, FclPartialKey, LclKey]


def make_key(shipment_type: ShipmentType | str, container_type: Optional[ContainerType | str] = None) -> ShipmentKey:
    """Monta a chave a partir dos campos soltos (banco / payload).

    O container só é aceito para FCL; para FCL_PARTIAL e LCL ele é ignorado.
    """
    shipment_type = ShipmentType(shipment_type)
    if shipment_type is ShipmentType.FCL:
        if not container_type:
            raise ValueError("Tipo de container é obrigatório para FCL.")
        return FclKey(ContainerType(container_type))
    if shipment_type is ShipmentType.FCL_PARTIAL:
        return FclPartialKey()
    return LclKey()


def container_type_of(key: ShipmentKey) -> Optional[str]:
    return key.container_type.value if isinstance(key, FclKey) else None


def container_key_of(key: ShipmentKey) -> str:
    """Valor normalizado usado na constraint única."""
    return container_type_of(key) or ""


def key_of_rule(rule) -> ShipmentKey:
    return make_key(rule.shipment_type, rule.container_type)


def describe_key(key: ShipmentKey) -> str:
    if isinstance(key, FclKey):
        return f"FCL {key.container_type.value}"
    if isinstance(key, FclPartialKey):
        return "FCL Parcial"
    return "LCL"
