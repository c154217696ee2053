# rates.py
# Python 3.x, PyQt5
# 환율 조회: urllib 로 open.er-api.com 호출, Qt 스레드풀에서 비동기 실행

import json
import logging
import math
import urllib.error
import urllib.request
from typing import Dict, List, Optional

from PyQt5.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal, pyqtSlot

from .config import AMOUNT_PLACES, CURRENCY_LIST_BASE, RATE_API_URL, REQUEST_TIMEOUT
from .numeric import format_amount, parse_number

logger = logging.getLogger(__name__)


class RateLookupError(Exception):
    """화면에 그대로 보여줄 수 있는 메시지를 담는다"""


def convert(value: float, rate: float) -> float:
    return value * rate


def converted_amount(entry_text: str, rate: Optional[float], places: int = AMOUNT_PLACES) -> str:
    """입력 문자열과 최근 환율로 환산 금액 문자열을 만든다. 환율이 없으면 빈 문자열"""
    if rate is None:
        return ''
    return format_amount(convert(parse_number(entry_text), rate), places)


class RateProvider:
    """기준 통화 하나에 대한 환율표를 받아온다"""

    def __init__(self, api_url: str = RATE_API_URL, timeout: float = REQUEST_TIMEOUT) -> None:
        self.api_url = api_url if api_url.endswith('/') else api_url + '/'
        self.timeout = timeout

    def latest(self, base: str) -> Dict[str, float]:
        url = self.api_url + base.upper()
        logger.info('[환율 요청] %s', url)
        try:
            with urllib.request.urlopen(url, timeout=self.timeout) as resp:
                payload = json.loads(resp.read().decode('utf-8'))
        except (urllib.error.URLError, OSError) as e:
            logger.error('[환율 실패] %s: %s', url, e)
            raise RateLookupError('Failed to fetch exchange rate. Please try again later.') from e
        except ValueError as e:
            logger.error('[환율 실패] 응답 JSON 오류: %s', e)
            raise RateLookupError('Exchange rate service returned an invalid response.') from e

        if not isinstance(payload, dict):
            payload = {'result': 'error'}
        rates = payload.get('rates')
        if payload.get('result', 'success') != 'success' or not isinstance(rates, dict):
            logger.error('[환율 실패] 비정상 응답: %s', payload.get('error-type', payload.get('result')))
            raise RateLookupError('Exchange rate service returned an invalid response.')
        return rates

    def rate(self, from_currency: str, to_currency: str) -> float:
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()
        if from_currency == to_currency:
            return 1.0

        rates = self.latest(from_currency)
        try:
            rate = float(rates[to_currency])
        except KeyError:
            raise RateLookupError('Unsupported currency: {}'.format(to_currency)) from None
        except (TypeError, ValueError):
            raise RateLookupError('Invalid rate for {}'.format(to_currency)) from None
        if not math.isfinite(rate) or rate <= 0:
            raise RateLookupError('Invalid rate for {}'.format(to_currency))
        logger.info('[환율] 1 %s = %s %s', from_currency, rate, to_currency)
        return rate

    def currencies(self) -> List[str]:
        try:
            return sorted(self.latest(CURRENCY_LIST_BASE))
        except RateLookupError as e:
            raise RateLookupError('Failed to fetch currencies. Please try again later.') from e


class _WorkerSignals(QObject):
    done = pyqtSignal(int, str, str, float)
    failed = pyqtSignal(int, str)


class _RateWorker(QRunnable):

    def __init__(self, provider: RateProvider, generation: int,
                 from_currency: str, to_currency: str) -> None:
        super().__init__()
        self.provider = provider
        self.generation = generation
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.signals = _WorkerSignals()

    def run(self) -> None:
        try:
            rate = self.provider.rate(self.from_currency, self.to_currency)
        except RateLookupError as e:
            self.signals.failed.emit(self.generation, str(e))
            return
        self.signals.done.emit(self.generation, self.from_currency, self.to_currency, rate)


class RateLookup(QObject):
    """
    통화쌍 환율을 백그라운드에서 조회한다.
    새 요청(또는 cancel)이 들어오면 진행 중인 요청 결과는 버린다.
    실패 시 재시도하지 않는다.
    """

    rate_ready = pyqtSignal(str, str, float)
    failed = pyqtSignal(str)

    def __init__(self, provider: RateProvider, pool: QThreadPool = None, parent=None) -> None:
        super().__init__(parent)
        self.provider = provider
        self.pool = pool or QThreadPool.globalInstance()
        self._generation = 0

    def request(self, from_currency: str, to_currency: str) -> None:
        self._generation += 1
        worker = _RateWorker(self.provider, self._generation, from_currency, to_currency)
        worker.signals.done.connect(self._on_done)
        worker.signals.failed.connect(self._on_failed)
        self.pool.start(worker)

    def cancel(self) -> None:
        self._generation += 1

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    @pyqtSlot(int, str, str, float)
    def _on_done(self, generation: int, from_currency: str, to_currency: str, rate: float) -> None:
        if not self.is_current(generation):
            logger.info('[환율] 지난 요청 결과 무시: %s->%s', from_currency, to_currency)
            return
        self.rate_ready.emit(from_currency, to_currency, rate)

    @pyqtSlot(int, str)
    def _on_failed(self, generation: int, message: str) -> None:
        if not self.is_current(generation):
            return
        self.failed.emit(message)
