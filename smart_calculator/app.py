# app.py
# Python 3.x, PyQt5
# 실행 진입점: 설정/로거 준비 후 메인 창을 띄운다

import argparse
import logging
import sys

from PyQt5.QtWidgets import QApplication

from .config import load_settings
from .log import setup_logger
from .windows import InputRouter, MainWindow


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='계산기와 환율 입력 키패드를 제공하는 Smart Calculator'
    )
    parser.add_argument('--log', default=None,
                        help='로그 파일 경로(기본값: smart_calculator.log)')
    parser.add_argument('--from', dest='from_currency', default=None,
                        help='환산할 통화(기본값: USD)')
    parser.add_argument('--to', dest='to_currency', default=None,
                        help='환산 대상 통화(기본값: BDT)')
    parser.add_argument('--tab', choices=('calculator', 'currency'), default='calculator',
                        help='처음 열 탭(기본값: calculator)')
    parser.add_argument('--debug', action='store_true',
                        help='키 입력마다 상태 전이를 로그에 남긴다')
    return parser.parse_args(argv)


def build_settings(args):
    settings = load_settings()
    if args.log is not None:
        settings.log_path = args.log
    if args.from_currency:
        settings.from_currency = args.from_currency.upper()
    if args.to_currency:
        settings.to_currency = args.to_currency.upper()
    settings.validate()
    return settings


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = build_settings(args)
    logger = setup_logger(settings.log_path, logging.DEBUG if args.debug else logging.INFO)
    logger.info('[시작] from=%s to=%s tab=%s',
                settings.from_currency, settings.to_currency, args.tab)

    app = QApplication(sys.argv[:1])
    router = InputRouter()
    app.installEventFilter(router)

    w = MainWindow(settings, router)
    w.show_tab(args.tab)
    w.show()
    w.currency.load_currencies()
    code = app.exec()
    logger.info('[종료] code=%d', code)
    return code


def run() -> None:
    try:
        sys.exit(main())
    except Exception:
        logging.getLogger('smart_calculator').exception('[오류] 예기치 못한 오류')
        sys.exit(1)


if __name__ == '__main__':
    run()
