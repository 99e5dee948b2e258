"""
ASN.1时间解码服务

证书有效期字段是 Time ::= CHOICE { utcTime UTCTime, generalTime GeneralizedTime }，
两种编码都按固定宽度的数字格式严格校验，解析结果统一为UTC时间。
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

# pyasn1_modules rfc5280.Time 的分支名称
UTC_TIME = 'utcTime'
GENERALIZED_TIME = 'generalTime'

# 两位年份的分界：< 70 为 20xx，>= 70 为 19xx
UTC_TIME_PIVOT = 70

_UTC_TIME_PATTERN = re.compile(
    r'([0-9]{2})([0-9]{2})([0-9]{2})([0-9]{2})([0-9]{2})([0-9]{2})?(Z|[+-][0-9]{4})?'
)

_GENERALIZED_TIME_PATTERN = re.compile(
    r'([0-9]{4})([0-9]{2})([0-9]{2})([0-9]{2})'
    r'(?:([0-9]{2})(?:([0-9]{2})(?:[.,]([0-9]+))?)?)?'
    r'(Z|[+-][0-9]{4})?'
)


def _parse_offset(offset: Optional[str]) -> timezone:
    """
    解析时区后缀

    Args:
        offset: 'Z'、'+HHMM'、'-HHMM' 或 None

    Returns:
        timezone: 对应的时区（缺省视为UTC）
    """
    if offset is None or offset == 'Z':
        return timezone.utc

    hours, minutes = int(offset[1:3]), int(offset[3:5])
    if hours > 23 or minutes > 59:
        raise ValueError(f"时区偏移无效: {offset}")

    delta = timedelta(hours=hours, minutes=minutes)
    return timezone(-delta if offset[0] == '-' else delta)


def _build_datetime(year: int, month: int, day: int, hour: int, minute: int,
                    second: int, microsecond: int, offset: Optional[str]) -> datetime:
    tz = _parse_offset(offset)

    # 闰秒 :60 顺延到下一秒
    leap = second == 60
    if leap:
        second = 59

    try:
        value = datetime(year, month, day, hour, minute, second, microsecond, tzinfo=tz)
        if leap:
            value += timedelta(seconds=1)
        return value.astimezone(timezone.utc)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"日期字段无效: {e}") from e


def decode_utc_time(value: str) -> datetime:
    """
    解码UTCTime（YYMMDDHHMM[SS][Z|±HHMM]）

    Args:
        value: UTCTime文本

    Returns:
        datetime: UTC时间

    Raises:
        ValueError: 格式不符合UTCTime
    """
    match = _UTC_TIME_PATTERN.fullmatch(value)
    if not match:
        raise ValueError(f"UTCTime格式无效: {value!r}")

    yy, month, day, hour, minute, second, offset = match.groups()

    year = int(yy)
    year += 2000 if year < UTC_TIME_PIVOT else 1900

    return _build_datetime(year, int(month), int(day), int(hour), int(minute),
                           int(second or 0), 0, offset)


def decode_generalized_time(value: str) -> datetime:
    """
    解码GeneralizedTime（YYYYMMDDHH[MM[SS[.fff]]][Z|±HHMM]）

    Args:
        value: GeneralizedTime文本

    Returns:
        datetime: UTC时间

    Raises:
        ValueError: 格式不符合GeneralizedTime
    """
    match = _GENERALIZED_TIME_PATTERN.fullmatch(value)
    if not match:
        raise ValueError(f"GeneralizedTime格式无效: {value!r}")

    year, month, day, hour, minute, second, fraction, offset = match.groups()

    # 小数秒截断到微秒
    microsecond = int((fraction or '').ljust(6, '0')[:6])

    return _build_datetime(int(year), int(month), int(day), int(hour), int(minute or 0),
                           int(second or 0), microsecond, offset)


_DECODERS: Dict[str, Callable[[str], datetime]] = {
    UTC_TIME: decode_utc_time,
    GENERALIZED_TIME: decode_generalized_time,
}


def decode_time(tag: str, value: str) -> datetime:
    """
    按时间编码类型解码

    Args:
        tag: 编码类型（UTC_TIME 或 GENERALIZED_TIME）
        value: 时间文本

    Returns:
        datetime: UTC时间

    Raises:
        ValueError: 编码类型未知或格式无效
    """
    decoder = _DECODERS.get(tag)
    if decoder is None:
        raise ValueError(f"未知的时间编码类型: {tag}")
    return decoder(value)
