"""
Report template system for the IdleLoops predictor.

Jinja2-based templates turning a simulation result into plain text.
"""

from pathlib import Path
from typing import Dict, Any, Optional
from jinja2 import Environment, FileSystemLoader, DictLoader, ChoiceLoader, TemplateNotFound

# Template directory; files here override the inline defaults
TEMPLATE_DIR = Path(__file__).parent


class ReportTemplateEngine:
    """
    Jinja2-based report template engine.

    Loads templates from disk first, then from DEFAULT_TEMPLATES.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = template_dir or TEMPLATE_DIR

        loaders = [DictLoader(DEFAULT_TEMPLATES)]
        if self.template_dir.exists():
            loaders.insert(0, FileSystemLoader(str(self.template_dir)))

        self.env = Environment(
            loader=ChoiceLoader(loaders),
            trim_blocks=True,
            lstrip_blocks=True,
        )

        # Register custom filters
        self.env.filters['amount'] = self._format_amount
        self.env.filters['validity'] = self._format_validity

    def _format_amount(self, value) -> str:
        """Format a ledger value: whole numbers plain, fractions to two places."""
        try:
            number = float(value)
        except (ValueError, TypeError):
            return str(value)
        if number.is_integer():
            return f"{int(number):,}"
        return f"{number:,.2f}"

    def _format_validity(self, is_valid) -> str:
        return '' if is_valid else ' [invalid]'

    def render(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template with context."""
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            return f"[Template '{template_name}' not found]"
        return template.render(**context)


# =============================================================================
# INLINE DEFAULT TEMPLATES
# Used when no template file overrides them
# =============================================================================

DEFAULT_TEMPLATES = {
    'report/summary.txt': '''
{% for row in snapshots %}
{{ "%3d" | format(row.index + 1) }}. {{ row.name }} x{{ row.repeat_count }}:{% for name in affected %} {{ name }} {{ row.resources[name] | amount }}{% endfor %}{{ row.is_valid | validity }}
{% endfor %}
Total mana: {{ total_mana | amount }}
''',

    'report/state.txt': '''
Stats:
{% for name, exp in state.stats.items() %}
  {{ name }}: {{ exp | amount }} exp (level {{ levels[name] }})
{% endfor %}
{% if state.progress %}
Loops:
{% for name, progression in state.progress.items() %}
  {{ name }}: {{ progression.completed }} segments, {{ progression.total }} total loops, {{ progression.progress | amount }} progress
{% endfor %}
{% endif %}
''',
}


# Global report template engine instance
_engine: Optional[ReportTemplateEngine] = None


def get_template_engine() -> ReportTemplateEngine:
    """Get or create the global report template engine."""
    global _engine
    if _engine is None:
        _engine = ReportTemplateEngine()
    return _engine


def render_template(template_name: str, context: Dict[str, Any]) -> str:
    """Convenience function to render a template."""
    return get_template_engine().render(template_name, context)
