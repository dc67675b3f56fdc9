import pytest

from sweeper.sweep.base import FileRecord, Verdict
from sweeper.sweep.classifier import MIN_SERVER_JAR_BYTES, classify, parse_size, verdicts
from sweeper.sweep.errors import UnknownSizeFormat


def jar(size):
    return FileRecord(name="server.jar", extension=".jar", size=size)


@pytest.mark.parametrize("record", [
    FileRecord(name="start.sh", extension=".sh", purpose="script"),
    FileRecord(name="plugins", purpose="script", is_directory=True),
    FileRecord(name="notes.txt", extension=".txt", purpose="script", is_editable=True, size="9GB"),
])
def test_script_purpose_is_always_suspicious(record):
    assert Verdict.SUSPICIOUS_SCRIPT in verdicts(record)


def test_xmrig_is_a_miner():
    assert verdicts(FileRecord(name="xmrig")) == [Verdict.SUSPICIOUS_MINER]


def test_miner_name_match_is_exact():
    assert verdicts(FileRecord(name="xmrig.json")) == [Verdict.CLEAN]
    assert verdicts(FileRecord(name="XMRIG")) == [Verdict.CLEAN]


def test_small_server_jar():
    assert verdicts(jar("17MB")) == [Verdict.SUSPICIOUS_JAR_SIZE]


def test_large_server_jar_is_clean():
    assert verdicts(jar("19MB")) == [Verdict.CLEAN]


def test_server_jar_in_kilobytes():
    assert parse_size("2000KB") == 2_048_000
    assert verdicts(jar("2000KB")) == [Verdict.SUSPICIOUS_JAR_SIZE]


def test_threshold_is_exclusive():
    assert verdicts(jar(f"{MIN_SERVER_JAR_BYTES}B")) == [Verdict.CLEAN]
    assert verdicts(jar(f"{MIN_SERVER_JAR_BYTES - 1}B")) == [Verdict.SUSPICIOUS_JAR_SIZE]


def test_unknown_unit_on_server_jar():
    detections = classify(jar("5GB"))
    assert [d.verdict for d in detections] == [Verdict.UNKNOWN_SIZE_FORMAT]
    assert detections[0].reason == "Unknown size format: 5GB"


def test_size_is_ignored_for_other_files():
    assert verdicts(FileRecord(name="world.zip", size="5GB")) == [Verdict.CLEAN]


def test_rules_fire_independently():
    record = FileRecord(name="xmrig", purpose="script")
    assert verdicts(record) == [Verdict.SUSPICIOUS_SCRIPT, Verdict.SUSPICIOUS_MINER]


def test_suspicious_jar_that_is_also_a_script():
    record = FileRecord(name="server.jar", purpose="script", size="10KB")
    assert verdicts(record) == [Verdict.SUSPICIOUS_SCRIPT, Verdict.SUSPICIOUS_JAR_SIZE]


def test_clean_detection_has_no_reason():
    [detection] = classify(FileRecord(name="eula.txt", purpose="text"))
    assert detection.verdict is Verdict.CLEAN
    assert detection.reason == ""
    assert not detection.verdict.is_suspicious


@pytest.mark.parametrize("text, expected", [
    ("17MB", 17 * 1024 * 1024),
    ("1.5 MB", int(1.5 * 1024 * 1024)),
    ("512B", 512),
    (" 3 KB ", 3 * 1024),
])
def test_parse_size(text, expected):
    assert parse_size(text) == expected


@pytest.mark.parametrize("text", ["5GB", "", "MB", "abcKB", "12", "1.2.3MB", "7 TB"])
def test_parse_size_rejects(text):
    with pytest.raises(UnknownSizeFormat):
        parse_size(text)
