"""
Data layer for UniClaw

수집기에서 넘어오는 풀 / 틱 / 포지션 / 가스 스냅샷 타입
"""

from .types import Token, Pool, Tick, Position, GasObservation
