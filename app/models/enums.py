# app/models/enums.py

from enum import Enum


class ShipmentType(str, Enum):
    FCL = "FCL"                  # container cheio, uma regra por tipo de container
    FCL_PARTIAL = "FCL_PARTIAL"  # FCL parcial, um único bucket por terminal
    LCL = "LCL"                  # carga consolidada


class ContainerType(str, Enum):
    GP_20 = "GP_20"
    GP_40 = "GP_40"
    HC_40 = "HC_40"
    RF_20 = "RF_20"
    RF_40 = "RF_40"


class ChargeType(str, Enum):
    PERCENTAGE = "PERCENTAGE"  # sobre o valor da carga
    FIXED = "FIXED"            # valor monetário


class FeeBasis(str, Enum):
    PER_BOX = "PER_BOX"
    PER_BL = "PER_BL"
    PER_WM = "PER_WM"
    PER_CONTAINER = "PER_CONTAINER"


class Currency(str, Enum):
    BRL = "BRL"
    USD = "USD"
    CNY = "CNY"
    EUR = "EUR"
