# config.py
# 기본 설정값 + 환경 변수 재정의

import os
from dataclasses import dataclass

# 환율 API (기준 통화를 URL 끝에 붙인다)
RATE_API_URL = 'https://open.er-api.com/v6/latest/'
REQUEST_TIMEOUT = 10.0  # 초
CURRENCY_LIST_BASE = 'USD'  # 통화 목록을 가져올 기준 통화

DEFAULT_FROM = 'USD'
DEFAULT_TO = 'BDT'
DEFAULT_AMOUNT = '1'
AMOUNT_PLACES = 4  # 환산 결과 소수 자릿수

LOG_PATH = 'smart_calculator.log'


@dataclass
class Settings:
    api_url: str = RATE_API_URL
    timeout: float = REQUEST_TIMEOUT
    from_currency: str = DEFAULT_FROM
    to_currency: str = DEFAULT_TO
    amount_places: int = AMOUNT_PLACES
    amount: str = DEFAULT_AMOUNT
    log_path: str = LOG_PATH

    def validate(self) -> None:
        if self.timeout <= 0:
            raise ValueError('timeout must be positive')
        if not (0 <= int(self.amount_places) <= 10):
            raise ValueError('amount_places must be 0..10')
        for code in (self.from_currency, self.to_currency):
            if len(code) != 3 or not code.isalpha():
                raise ValueError('currency code must be 3 letters: {!r}'.format(code))


def load_settings(environ=None) -> Settings:
    """SMART_CALC_* 환경 변수가 있으면 기본값 대신 쓴다"""
    env = os.environ if environ is None else environ
    settings = Settings(
        api_url=env.get('SMART_CALC_API_URL', RATE_API_URL),
        timeout=float(env.get('SMART_CALC_TIMEOUT', REQUEST_TIMEOUT)),
        log_path=env.get('SMART_CALC_LOG', LOG_PATH),
    )
    settings.validate()
    return settings
