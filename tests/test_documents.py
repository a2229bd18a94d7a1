import pathlib

import pytest

from i18n_extract.documents import ScriptDocumentHandler, VueDocumentHandler, detect_handler
from i18n_extract.errors import DocumentFormatError, UnsupportedFileTypeError

COMPONENT = """<template>
  <div>
    <template v-if="ok"><span>"你好"</span></template>
  </div>
</template>

<script>
export default {
  data() { return { msg: '欢迎' } }
}
</script>

<script setup lang="ts">
const title = '标题'
</script>
"""


def test_vue_handler_splits_template_and_scripts():
    document = VueDocumentHandler(pathlib.Path("Hello.vue")).split(COMPONENT)

    assert '<template v-if="ok"><span>"你好"</span></template>' in document.template
    assert "欢迎" in document.script
    assert "标题" in document.script
    assert "你好" not in document.script
    assert document.raw_text == COMPONENT


def test_missing_regions_are_none():
    document = VueDocumentHandler(pathlib.Path("Only.vue")).split("<style>.a{}</style>")
    assert document.template is None
    assert document.script is None
    assert document.regions() == []


def test_unclosed_template_is_a_format_error():
    with pytest.raises(DocumentFormatError):
        VueDocumentHandler(pathlib.Path("Broken.vue")).split("<template><div>你好</div>")


def test_unclosed_script_is_a_format_error():
    with pytest.raises(DocumentFormatError):
        VueDocumentHandler(pathlib.Path("Broken.vue")).split("<script>const a = '你好'")


def test_script_handler_uses_whole_file():
    document = ScriptDocumentHandler(pathlib.Path("messages.js")).split("export default '你好'")
    assert document.template is None
    assert document.script == "export default '你好'"


def test_detect_handler_by_suffix():
    assert detect_handler(pathlib.Path("A.vue"))[0] == "vue"
    assert detect_handler(pathlib.Path("a.ts"))[0] == "script"
    with pytest.raises(UnsupportedFileTypeError):
        detect_handler(pathlib.Path("a.md"))


def test_save_round_trips_line_endings(tmp_path):
    path = tmp_path / "Crlf.vue"
    path.write_bytes("<template>\r\n<p>你好</p>\r\n</template>\r\n".encode("utf-8"))
    handler = VueDocumentHandler(path)

    content = handler.read()
    handler.save(content.replace("你好", "再见"))

    assert path.read_bytes() == "<template>\r\n<p>再见</p>\r\n</template>\r\n".encode("utf-8")
