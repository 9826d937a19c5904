"""
Prediction report for the IdleLoops predictor.

Coordinates the host snapshot, the simulation engine and the report
templates to show a planned action list as plain text.
"""

from typing import Dict, Any, Optional, List
from pathlib import Path
import json
import logging
import sys

from engine import SimulationEngine, SimulationResult, new_simulation
from host import HostEnvironment, create_host
from report_templates import ReportTemplateEngine, get_template_engine


class PredictionReport:
    """
    Central report coordinator.

    Bridges action list → simulation → templates → text output.
    """

    def __init__(
        self,
        host: HostEnvironment,
        engine: Optional[SimulationEngine] = None,
        templates: Optional[ReportTemplateEngine] = None,
    ):
        self.host = host
        self.engine = engine or new_simulation(host)
        self.templates = templates or get_template_engine()

    def predict(self, action_list: List[Any]) -> SimulationResult:
        return self.engine.simulate(action_list)

    def render_summary(self, result: SimulationResult) -> str:
        """One line per listed action with its affected resources, plus total mana."""
        return self.templates.render('report/summary.txt', result.to_dict())

    def render_state(self, result: SimulationResult) -> str:
        """Final stat experience and loop progress."""
        context = result.to_dict()
        context['levels'] = {
            name: self.host.level_from_exp(exp)
            for name, exp in result.state.stats.items()
        }
        return self.templates.render('report/state.txt', context)

    def render(self, action_list: List[Any]) -> str:
        result = self.predict(action_list)
        return self.render_summary(result) + self.render_state(result)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def load_action_list(path) -> List[Dict[str, Any]]:
    """Read a planned action list ([{"name": ..., "loops": ...}, ...]) from JSON."""
    with open(Path(path), 'r') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError("Action list must be a JSON array")
    return data


# =============================================================================
# MAIN
# =============================================================================

if __name__ == '__main__':
    if len(sys.argv) != 3:
        print("Usage: python report.py <host_snapshot.json> <action_list.json>")
        sys.exit(2)

    logging.basicConfig(level=logging.INFO)
    host = create_host('file', path=sys.argv[1])
    report = PredictionReport(host)

    print(report.render(load_action_list(sys.argv[2])))
