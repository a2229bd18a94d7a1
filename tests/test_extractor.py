import json

import pytest

from i18n_extract import extractor
from i18n_extract.errors import ConfigurationError, DictionaryFormatError, ErrorCategory
from i18n_extract.extractor import ExtractionRunner, build_key_generator
from i18n_extract.keys import KeyGenerator, LocalKeyGenerator, RemoteKeyGenerator
from i18n_extract.structures import ExtractionOptions

HELLO_COMPONENT = """<template>
  <div>"你好"</div>
</template>
<script>
export default {
  mounted() {
    this.msg = '你好'
  }
}
</script>
"""


class DictionaryKeys(KeyGenerator):
    """Deterministic, collision-free keys for readable assertions."""

    def __init__(self, keys):
        self.keys = keys
        self.calls = []

    def generate(self, text):
        self.calls.append(text)
        return self.keys[text]


def _options(tmp_path, **overrides):
    values = {
        "scan_dirs": [tmp_path / "src"],
        "dictionary_path": tmp_path / "i18n" / "zh-CN.json",
    }
    values.update(overrides)
    (tmp_path / "i18n").mkdir(exist_ok=True)
    return ExtractionOptions(**values)


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_template_and_script_share_one_key(tmp_path):
    component = _write(tmp_path / "src" / "Hello.vue", HELLO_COMPONENT)
    runner = ExtractionRunner(_options(tmp_path))

    summary = runner.run()

    assert runner.translations == {"text___": "你好"}
    rewritten = component.read_text(encoding="utf-8")
    assert "<div>\"$t('text___')\"</div>" in rewritten
    assert "this.msg = this.$t('text___')" in rewritten
    assert summary.processed_files == 1
    assert summary.extracted_texts == 1
    dictionary = json.loads((tmp_path / "i18n" / "zh-CN.json").read_text(encoding="utf-8"))
    assert dictionary == {"text___": "你好"}


def test_statistics_count_distinct_keys_and_successful_files(tmp_path):
    _write(tmp_path / "src" / "A.vue", "<template><p>\"确定\"</p></template>")
    _write(tmp_path / "src" / "B.vue", "<script>const a = '确定'; const b = '取消订单'</script>")
    _write(tmp_path / "src" / "C.vue", "<template><p>\"没有结束\"</p>")
    keys = DictionaryKeys({"确定": "ok", "取消订单": "cancelOrder"})
    runner = ExtractionRunner(_options(tmp_path), key_generator=keys)

    summary = runner.run()

    assert summary.scanned_files == 3
    assert summary.processed_files == 2
    assert summary.extracted_texts == 2
    assert summary.total_errors == 1
    assert runner.error_policy.records[0].category is ErrorCategory.FORMAT
    assert keys.calls == ["确定", "取消订单"]


def test_failed_file_contributes_no_entries(tmp_path):
    _write(tmp_path / "src" / "Broken.vue", "<script>const a = '坏了'")
    runner = ExtractionRunner(_options(tmp_path))

    summary = runner.run()

    assert runner.translations == {}
    assert summary.processed_files == 0
    assert "Broken.vue" in summary.error_messages[0]


def test_commented_and_excluded_text_is_not_extracted(tmp_path):
    component = _write(
        tmp_path / "src" / "Notes.vue",
        "<script>\n// '注释'\n/* '块注释' */\nconst n = '123'\nconst t = '保存'\n</script>\n",
    )
    keys = DictionaryKeys({"保存": "save"})
    runner = ExtractionRunner(_options(tmp_path), key_generator=keys)

    runner.run()

    assert runner.translations == {"save": "保存"}
    assert "// '注释'" in component.read_text(encoding="utf-8")


def test_existing_dictionary_entries_survive(tmp_path):
    options = _options(tmp_path)
    options.dictionary_path.write_text(json.dumps({"legacy": "旧文本"}), encoding="utf-8")
    _write(tmp_path / "src" / "Hello.vue", HELLO_COMPONENT)

    summary = ExtractionRunner(options).run()

    assert summary.dictionary_size == 2
    merged = json.loads(options.dictionary_path.read_text(encoding="utf-8"))
    assert merged == {"legacy": "旧文本", "text___": "你好"}


def test_malformed_dictionary_fails_the_run(tmp_path):
    options = _options(tmp_path)
    options.dictionary_path.write_text("{oops", encoding="utf-8")
    _write(tmp_path / "src" / "Hello.vue", HELLO_COMPONENT)

    with pytest.raises(DictionaryFormatError):
        ExtractionRunner(options).run()


def test_backup_and_log_are_written(tmp_path):
    _write(tmp_path / "src" / "Hello.vue", HELLO_COMPONENT)
    _write(tmp_path / "src" / "Broken.vue", "<template>")
    options = _options(
        tmp_path,
        backup=True,
        backup_dir=tmp_path / "backup",
        generate_log=True,
        log_path=tmp_path / "extract.log",
    )

    ExtractionRunner(options).run()

    backups = sorted(p.name for p in (tmp_path / "backup").iterdir())
    assert len(backups) == 2
    assert backups[1].startswith("Hello.vue.")
    with_original = (tmp_path / "backup" / backups[1]).read_text(encoding="utf-8")
    assert with_original == HELLO_COMPONENT
    log_lines = (tmp_path / "extract.log").read_text(encoding="utf-8").splitlines()
    assert any("Error:" in line and "Broken.vue" in line for line in log_lines)
    assert any("Processed:" in line and "Hello.vue" in line for line in log_lines)


def test_runs_do_not_share_state(tmp_path):
    _write(tmp_path / "src" / "Hello.vue", HELLO_COMPONENT)
    first = ExtractionRunner(_options(tmp_path))
    first.run()

    second = ExtractionRunner(_options(tmp_path))
    summary = second.run()

    # The component was already rewritten, so nothing is left to extract.
    assert second.translations == {}
    assert summary.extracted_texts == 0
    assert summary.dictionary_size == 1


def test_unchanged_files_are_not_rewritten(tmp_path):
    component = _write(tmp_path / "src" / "Plain.vue", "<template><p>Hello</p></template>")
    before = component.stat().st_mtime_ns
    runner = ExtractionRunner(_options(tmp_path))

    runner.run()

    assert component.stat().st_mtime_ns == before
    assert runner.processed_files == {component}


def test_build_key_generator_selects_remote_with_local_fallback(tmp_path):
    local = build_key_generator(_options(tmp_path))
    remote = build_key_generator(
        _options(tmp_path, key_namer="http", ai_endpoint="https://naming.example")
    )
    assert isinstance(local, LocalKeyGenerator)
    assert isinstance(remote, RemoteKeyGenerator)
    assert isinstance(remote.fallback, LocalKeyGenerator)


@pytest.mark.parametrize(
    "overrides",
    [
        {"script_pattern": "[一-"},
        {"multi_line_comment": "/\\*("},
        {"exclude_patterns": ["^\\d+$", "(unbalanced"]},
    ],
)
def test_invalid_patterns_are_configuration_errors(tmp_path, overrides):
    with pytest.raises(ConfigurationError, match="Invalid regular expression"):
        ExtractionRunner(_options(tmp_path, **overrides))


def test_runner_closes_the_key_generator_it_built(tmp_path, monkeypatch):
    class ClosingKeys(LocalKeyGenerator):
        closed = False

        def close(self):
            self.closed = True

    built = ClosingKeys()
    monkeypatch.setattr(extractor, "build_key_generator", lambda options: built)
    _write(tmp_path / "src" / "Hello.vue", HELLO_COMPONENT)

    ExtractionRunner(_options(tmp_path)).run()

    assert built.closed is True


def test_runner_leaves_injected_key_generator_open(tmp_path):
    class ClosingKeys(DictionaryKeys):
        closed = False

        def close(self):
            self.closed = True

    keys = ClosingKeys({"你好": "hello"})
    _write(tmp_path / "src" / "Hello.vue", HELLO_COMPONENT)

    ExtractionRunner(_options(tmp_path), key_generator=keys).run()

    assert keys.closed is False
