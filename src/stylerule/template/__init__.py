from stylerule.template.executor import Template, format_value
from stylerule.template.transformer import compile_template

__all__ = ["Template", "compile_template", "format_value"]
