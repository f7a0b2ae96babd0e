"""Word-compatible document export (HTML that Word opens as .doc)."""

import html

from edu_master.export.files import ExportedFile, export_errors, make_file
from edu_master.parsing.report import render_report_html

_BOM = "\ufeff"

_PRINT_CSS = """
  body { font-family: 'Malgun Gothic', sans-serif; font-size: 11pt; line-height: 1.6; }
  table { border-collapse: collapse; width: 100%; margin: 20px 0; }
  td, th { border: 1px solid #000; padding: 8px; text-align: left; vertical-align: top; }
  th { background-color: #f0f0f0; font-weight: bold; }
  h1 { font-size: 18pt; font-weight: bold; color: #000; margin-bottom: 15px; }
  h2 { font-size: 14pt; font-weight: bold; color: #333; margin-top: 20px;
       background: #f9f9f9; padding: 5px; }
  h3 { font-size: 12pt; font-weight: bold; margin-top: 15px; }
  details { margin-top: 24px; border-top: 1px solid #ccc; }
  summary { font-weight: bold; }
"""


def render_word_html(markdown_text: str, title: str) -> str:
    """Build the full Office-namespaced HTML document."""
    escaped_title = html.escape(title)
    body = render_report_html(markdown_text)
    return (
        "<html xmlns:o='urn:schemas-microsoft-com:office:office' "
        "xmlns:w='urn:schemas-microsoft-com:office:word' "
        "xmlns='http://www.w3.org/TR/REC-html40'>\n"
        "<head>\n<meta charset='utf-8'>\n"
        f"<title>{escaped_title}</title>\n"
        f"<style>{_PRINT_CSS}</style>\n"
        "</head>\n<body>\n"
        f"<h1>{escaped_title}</h1>\n"
        f"{body}\n"
        "</body>\n</html>"
    )


def to_word_document(markdown_text: str, title: str, *, prefix: str = "") -> ExportedFile:
    with export_errors("doc"):
        document = _BOM + render_word_html(markdown_text, title)
    return make_file(prefix, title, "doc", document.encode("utf-8"))
