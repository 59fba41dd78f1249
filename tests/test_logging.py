import io
import logging

from tingrid.utils.logging import get_logger, setup_logging


def test_get_logger_is_package_child():
    assert get_logger("tingrid.mesh.edges").name == "tingrid.mesh.edges"
    assert get_logger("tingrid").name == "tingrid"
    assert get_logger("plugin").name == "tingrid.plugin"
    # A name that merely starts with the package name is still nested
    assert get_logger("tingridx").name == "tingrid.tingridx"


def test_setup_logging_levels_and_stream():
    stream = io.StringIO()
    logger = setup_logging(stream=stream)
    assert logger.level == logging.INFO

    child = get_logger("tingrid.test")
    child.debug("hidden detail")
    child.info("visible progress")
    output = stream.getvalue()
    assert "visible progress" in output
    assert "hidden detail" not in output
    assert " - tingrid.test - INFO - " in output

    setup_logging(verbose=True, stream=stream)
    child.debug("shown detail")
    assert "shown detail" in stream.getvalue()


def test_setup_logging_replaces_handler():
    first, second = io.StringIO(), io.StringIO()
    setup_logging(stream=first)
    setup_logging(stream=second)
    assert len(logging.getLogger("tingrid").handlers) == 1

    get_logger("tingrid.test").info("once")
    assert first.getvalue() == ""
    assert second.getvalue().count("once") == 1
