import logging
from pathlib import Path

from intentlocator.models import ElementDescriptor, LocatorLogDetail, Role
from intentlocator.result_logger import LoggingResolvedElementLogger, build_logger


def test_record_lists_locators_for_requested_detail(caplog) -> None:
    logger = logging.getLogger("intentlocator.tests.resolve")
    caplog.set_level(logging.INFO, logger=logger.name)
    descriptor = ElementDescriptor(tag="input", id="pwd1")

    LoggingResolvedElementLogger(LocatorLogDetail.CSS_ONLY, logger).log_resolved_element(
        "password", Role.PASSWORD_FIELD, "//*[@id='pwd1']", "#pwd1", descriptor
    )

    assert caplog.messages == ["[intentlocator] intent='password', role=PASSWORD_FIELD, css=#pwd1, id=pwd1, name=None"]


def test_record_without_descriptor_or_role(caplog) -> None:
    logger = logging.getLogger("intentlocator.tests.query")
    caplog.set_level(logging.INFO, logger=logger.name)

    LoggingResolvedElementLogger(LocatorLogDetail.BOTH, logger).log_resolved_element(
        "CSS(#go)", None, "//*[@id='go']", "#go", None
    )

    assert caplog.messages == ["[intentlocator] intent='CSS(#go)', role=None, xpath=//*[@id='go'], css=#go"]


def test_none_detail_keeps_identity_only(caplog) -> None:
    logger = logging.getLogger("intentlocator.tests.none")
    caplog.set_level(logging.INFO, logger=logger.name)

    result_logger = LoggingResolvedElementLogger(None, logger)
    result_logger.log_resolved_element("login", Role.LOGIN_BUTTON, None, None, ElementDescriptor(tag="button", name="go"))

    assert result_logger.detail is LocatorLogDetail.NONE
    assert caplog.messages == ["[intentlocator] intent='login', role=LOGIN_BUTTON, id=None, name=go"]


def test_build_logger_writes_to_file_once(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "resolve.log"
    logger = build_logger("intentlocator.tests.file", log_file)
    try:
        assert build_logger("intentlocator.tests.file", log_file) is logger
        assert len(logger.handlers) == 1
        assert logger.propagate is False

        logger.info("resolved login field")
        for handler in logger.handlers:
            handler.flush()

        assert "INFO resolved login field" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
