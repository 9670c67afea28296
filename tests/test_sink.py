import threading
from datetime import datetime

from conftest import memory_sink, sink_output


def test_concurrent_writes_never_tear_lines():
    sink = memory_sink()
    writers = 8
    per_writer = 200

    def worker(index: int) -> None:
        for n in range(per_writer):
            sink.write(f"writer-{index} message-{n} " + "x" * 40)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(writers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = sink_output(sink).splitlines()
    assert len(lines) == sink.writes == writers * per_writer
    for line in lines:
        prefix, message, padding = line.split(" ")
        assert prefix.startswith("writer-")
        assert message.startswith("message-")
        assert padding == "x" * 40


def test_status_and_error_are_single_writes():
    sink = memory_sink()

    sink.status("Connected to the server at 127.0.0.1:4000.")
    sink.error("Server disconnected.")

    assert sink.writes == 2
    assert sink_output(sink).splitlines() == [
        "Connected to the server at 127.0.0.1:4000.",
        "Server disconnected.",
    ]


def test_format_inbound_drops_one_trailing_newline():
    from chat_client.sink import format_inbound

    assert format_inbound("hello\n").plain == "hello"
    assert format_inbound("hello\r\n").plain == "hello"
    assert format_inbound("a\n\n").plain == "a\n"
    assert format_inbound("no newline").plain == "no newline"


def test_format_inbound_timestamp_prefix():
    from chat_client.sink import format_inbound

    text = format_inbound("[bob] hi", timestamps=True, now=datetime(2024, 1, 2, 13, 4, 5))

    assert text.plain == "[13:04:05] [bob] hi"


def test_sink_for_config_respects_color_setting():
    from chat_client.sink import OutputSink
    from shared.config import ClientConfig

    assert OutputSink.for_config(ClientConfig(color=False)).console.no_color is True
    assert OutputSink.for_config(ClientConfig(color=True)).console.is_terminal is True
