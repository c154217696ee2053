# windows.py
# Python 3.x, PyQt5
# 렌더 표면(계산기/환율 키패드) + 키보드 입력 라우팅

import logging
import math
from typing import Optional

from PyQt5.QtCore import QEvent, QObject, Qt
from PyQt5.QtGui import QFont
from PyQt5.QtWidgets import (
    QApplication,
    QComboBox,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QTabWidget,
    QVBoxLayout,
    QWidget,
)

from .accumulator import CALCULATOR_KEYS, CURRENCY_KEYS, Accumulator, Rendering
from .config import Settings
from .keymap import button_event, currency_key_event_for, key_event_for
from .numeric import parse_number
from .rates import RateLookup, RateLookupError, RateProvider, converted_amount

logger = logging.getLogger(__name__)

KEYPAD_ROWS = [
    ['AC', '+/-', '%', '÷'],
    ['7',  '8',   '9', '×'],
    ['4',  '5',   '6', '−'],
    ['1',  '2',   '3', '+'],
    ['⌫',  '0',   '.', '='],
]


def display_for(entry_text: str) -> str:
    """NaN 은 'Error', 무한대는 문자 그대로"""
    if math.isnan(parse_number(entry_text)):
        return 'Error'
    return entry_text


class KeypadWidget(QWidget):
    """표시부 두 줄 + 버튼 그리드. 하위 클래스가 _render 를 채운다"""

    key_mapper = staticmethod(key_event_for)

    def __init__(self, engine: Accumulator, parent=None) -> None:
        super().__init__(parent)
        self.engine = engine
        self.buttons = {}
        self._build_ui()
        self.engine.subscribe(self._render)

    def _build_display(self, root: QVBoxLayout) -> None:
        self.indicator = QLabel()
        self.indicator.setAlignment(Qt.AlignRight)
        root.addWidget(self.indicator)

        self.display = QLineEdit()
        self.display.setReadOnly(True)
        self.display.setAlignment(Qt.AlignRight)
        font = QFont(self.display.font())
        font.setPointSize(28)
        self.display.setFont(font)
        root.addWidget(self.display)

    def _build_ui(self) -> None:
        root = QVBoxLayout()
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(8)
        self.setLayout(root)

        self._build_display(root)

        grid = QGridLayout()
        grid.setSpacing(6)
        root.addLayout(grid)

        for r, row in enumerate(KEYPAD_ROWS):
            for c, label in enumerate(row):
                btn = QPushButton(label)
                btn.setMinimumHeight(56)
                btn.setCursor(Qt.PointingHandCursor)
                # 키보드 입력은 InputRouter 가 받는다
                btn.setFocusPolicy(Qt.NoFocus)
                event = button_event(label)
                btn.setEnabled(event is not None and self.engine.accepts(event.key_class))
                # clicked는 checked(bool) 인자를 내보내므로 첫 인자를 흡수하도록 작성
                btn.clicked.connect(lambda checked=False, ch=label: self.on_button(ch))
                grid.addWidget(btn, r, c)
                self.buttons[label] = btn

    def on_button(self, ch: str) -> None:
        event = button_event(ch)
        if event is not None:
            self.engine.handle(event)

    def handle_key(self, key: int, text: str) -> bool:
        """매핑된 키면 처리하고 True"""
        event = self.key_mapper(key, text)
        if event is None or not self.engine.accepts(event.key_class):
            return False
        self.engine.handle(event)
        return True

    def _render(self, rendering: Rendering) -> None:
        raise NotImplementedError


class CalculatorWindow(KeypadWidget):
    """사칙연산 계산기"""

    def __init__(self, parent=None) -> None:
        super().__init__(Accumulator(CALCULATOR_KEYS, name='calculator'), parent)
        self._render(self.engine.rendering())

    def _render(self, rendering: Rendering) -> None:
        self.indicator.setText(rendering.indicator())
        self.display.setText(display_for(rendering.entry_text))


class CurrencyWindow(KeypadWidget):
    """
    환율 입력 키패드. 연산자 키는 비활성.
    표시 금액은 (입력값, 최근 환율)만으로 다시 계산한다.
    """

    key_mapper = staticmethod(currency_key_event_for)

    def __init__(self, settings: Settings, provider: Optional[RateProvider] = None,
                 parent=None) -> None:
        super().__init__(Accumulator(CURRENCY_KEYS, initial_entry=settings.amount,
                                     name='currency'), parent)
        self.settings = settings
        self.provider = provider or RateProvider(settings.api_url, settings.timeout)
        self.rate = None  # 최근 환율 (없으면 None)
        self.error = ''

        self.lookup = RateLookup(self.provider, parent=self)
        self.lookup.rate_ready.connect(self.on_rate_ready)
        self.lookup.failed.connect(self.on_rate_failed)

        self.set_currencies([])
        self.from_box.currentTextChanged.connect(self.on_pair_changed)
        self.to_box.currentTextChanged.connect(self.on_pair_changed)
        self._render(self.engine.rendering())

    def _build_display(self, root: QVBoxLayout) -> None:
        bar = QHBoxLayout()
        self.from_box = QComboBox()
        self.to_box = QComboBox()
        self.swap_button = QPushButton('⇌')
        self.swap_button.setFocusPolicy(Qt.NoFocus)
        self.swap_button.clicked.connect(self.swap_currencies)
        bar.addWidget(self.from_box)
        bar.addWidget(self.swap_button)
        bar.addWidget(self.to_box)
        root.addLayout(bar)

        super()._build_display(root)

        self.error_label = QLabel()
        self.error_label.setStyleSheet('color: red')
        root.addWidget(self.error_label)

    def set_currencies(self, codes) -> None:
        codes = list(codes)
        for code in (self.settings.from_currency, self.settings.to_currency):
            if code not in codes:
                codes.append(code)
        for box, current in ((self.from_box, self.settings.from_currency),
                             (self.to_box, self.settings.to_currency)):
            box.blockSignals(True)
            box.clear()
            box.addItems(codes)
            box.setCurrentText(current)
            box.blockSignals(False)

    def load_currencies(self) -> None:
        try:
            codes = self.provider.currencies()
        except RateLookupError as e:
            logger.error('[통화 목록] %s', e)
            self.show_error(str(e))
            codes = []
        self.set_currencies(codes)
        self.on_pair_changed()

    @property
    def from_currency(self) -> str:
        return self.from_box.currentText()

    @property
    def to_currency(self) -> str:
        return self.to_box.currentText()

    def swap_currencies(self) -> None:
        src, dst = self.from_currency, self.to_currency
        self.from_box.blockSignals(True)
        self.from_box.setCurrentText(dst)
        self.from_box.blockSignals(False)
        self.to_box.setCurrentText(src)
        if src == dst:
            self.on_pair_changed()

    def on_pair_changed(self, *_) -> None:
        # 통화쌍이 바뀌면 이전 환율은 더 이상 유효하지 않다
        self.rate = None
        self._render(self.engine.rendering())
        self.lookup.request(self.from_currency, self.to_currency)

    def on_rate_ready(self, from_currency: str, to_currency: str, rate: float) -> None:
        if (from_currency, to_currency) != (self.from_currency, self.to_currency):
            return
        self.rate = rate
        self.show_error('')
        self._render(self.engine.rendering())

    def on_rate_failed(self, message: str) -> None:
        self.show_error(message)

    def show_error(self, message: str) -> None:
        self.error = message
        self.error_label.setText(message)

    def _render(self, rendering: Rendering) -> None:
        self.indicator.setText('{} {} ='.format(rendering.entry_text, self.from_currency))
        amount = converted_amount(rendering.entry_text, self.rate, self.settings.amount_places)
        self.display.setText('{} {}'.format(display_for(amount) if amount else '…',
                                            self.to_currency))


def popup_open() -> bool:
    return QApplication.activePopupWidget() is not None


class InputRouter(QObject):
    """
    키보드 이벤트를 현재 활성 키패드 하나에만 전달한다.
    QApplication 에 eventFilter 로 설치한다.
    """

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.active = None

    def set_active(self, surface) -> None:
        self.active = surface
        logger.debug('[입력] 활성 키패드: %s', getattr(surface, 'engine', None) and surface.engine.name)

    def dispatch(self, key: int, text: str) -> bool:
        if self.active is None:
            return False
        return self.active.handle_key(key, text)

    def eventFilter(self, obj, event) -> bool:
        # 콤보박스 목록 같은 팝업이 열려 있으면 키는 팝업 몫
        if event.type() == QEvent.KeyPress and not popup_open():
            if self.dispatch(event.key(), event.text()):
                return True
        return super().eventFilter(obj, event)


class MainWindow(QWidget):
    """탭 두 개(계산기/환율)와 입력 라우터"""

    def __init__(self, settings: Settings, router: InputRouter, provider=None) -> None:
        super().__init__()
        self.setWindowTitle('Smart Calculator')
        self.router = router

        root = QVBoxLayout()
        self.setLayout(root)
        self.tabs = QTabWidget()
        self.tabs.setFocusPolicy(Qt.NoFocus)
        root.addWidget(self.tabs)

        self.calculator = CalculatorWindow()
        self.currency = CurrencyWindow(settings, provider)
        self.tabs.addTab(self.calculator, 'Calculator')
        self.tabs.addTab(self.currency, 'Currency')
        self.tabs.currentChanged.connect(self.on_tab_changed)
        self.on_tab_changed(self.tabs.currentIndex())

        self.resize(380, 560)

    def on_tab_changed(self, index: int) -> None:
        self.router.set_active(self.tabs.widget(index))

    def show_tab(self, name: str) -> None:
        self.tabs.setCurrentWidget(self.currency if name == 'currency' else self.calculator)
