"""
오류 및 sentinel 정의

- InputValidationError: 잘못된 범위, 알 수 없는 이름, spacing 미정렬 틱
- InvalidTickRange: 틱 범위 오류
- ConfigError: 설정 파일 / 환경변수 오류
- UNDEFINED: 분모가 0인 계산 결과 (NaN 대신 반환)

"수익 없음"이나 게이트 거절은 오류가 아니라 reason 코드가 붙은 반환값입니다.
"""


class UniclawError(Exception):
    """UniClaw 기본 오류"""
    pass


class InputValidationError(UniclawError, ValueError):
    """입력값 검증 오류"""
    pass


class InvalidTickRange(InputValidationError):
    """틱 범위 오류 (tick_upper <= tick_lower, 범위 초과, spacing 미정렬)"""
    pass


class ConfigError(InputValidationError):
    """설정 오류"""
    pass


class UndefinedResult:
    """분모가 0이라 정의되지 않는 계산 결과

    bool 값은 False. 호출자는 `result is UNDEFINED`로 "데이터 없음"을 분기합니다.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __reduce__(self):
        return (UndefinedResult, ())


UNDEFINED = UndefinedResult()


def is_undefined(value) -> bool:
    return value is UNDEFINED
