from typing import Optional

import markdown
from markupsafe import Markup

from docpad.core.config import settings


def render_markdown(text: Optional[str], allow_raw_html: Optional[bool] = None) -> Markup:
    """Преобразование markdown в HTML, безопасный для вставки в шаблон.

    Используется стандартный синтаксис без расширений. Если сырой HTML
    запрещен (по умолчанию), теги из текста экранируются, а не передаются
    в страницу как есть.
    """
    if not text or not text.strip():
        return Markup("")

    if allow_raw_html is None:
        allow_raw_html = settings.markdown_allow_raw_html

    # экземпляр Markdown хранит состояние между вызовами convert()
    md = markdown.Markdown(extensions=[], output_format="html")
    if not allow_raw_html:
        md.preprocessors.deregister("html_block")
        md.inlinePatterns.deregister("html")

    return Markup(md.convert(text))
