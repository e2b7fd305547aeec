"""
价格计算
nights = ceil((离店 - 入住) / 1 天)，total = 单价 × 房间数 × 晚数
"""
from datetime import datetime
from decimal import Decimal
from typing import Union
from app.models.ontology import count_nights


def calculate_total_price(price: Union[Decimal, int, float, str], rooms: int,
                          check_in: datetime, check_out: datetime) -> Decimal:
    """计算订单总价"""
    return Decimal(str(price)) * rooms * count_nights(check_in, check_out)
