"""
Merge an untrusted external analysis with the deterministic baseline.

Each baseline leaf is resolved independently: the external candidate paths are
tried in order and the first well-formed value wins, otherwise the baseline
value is used. The merged result is built fresh; neither input is mutated.
"""

import copy
import logging
from collections.abc import Mapping

from .validation import is_finite_number

logger = logging.getLogger(__name__)

NUMBER = "number"
TEXT = "text"

PHASES = ("L1", "L2", "L3")

_MISSING = object()


class Leaf:
    """One baseline field and the external paths that may provide it"""

    __slots__ = ("path", "kind", "candidates")

    def __init__(self, path: tuple, kind: str = NUMBER, alternates: tuple = ()):
        self.path = path
        self.kind = kind
        self.candidates = (path,) + tuple(alternates)

    def __repr__(self):
        return f"Leaf({'.'.join(self.path)})"


def _phase_aliases(prefix: tuple, phase: str, flat_prefix: tuple | None = None) -> tuple:
    num = phase[1]
    aliases = [prefix + (phase.lower(),), prefix + (f"phase_{num}",)]
    if flat_prefix is not None:
        group, name = flat_prefix
        aliases.append((group, f"{name}_{phase}"))
    return tuple(aliases)


def _build_leaf_table() -> tuple:
    leaves = []

    for group in ("rms_values", "peak_values"):
        for quantity in ("voltage", "current"):
            prefix = (group, quantity)
            for phase in PHASES:
                leaves.append(
                    Leaf(
                        prefix + (phase,),
                        alternates=_phase_aliases(prefix, phase, (group, quantity)),
                    )
                )
            leaves.append(Leaf(prefix + ("units",), TEXT))

    for pair in ("L12", "L23", "L31"):
        prefix = ("rms_values", "line_to_line_voltage")
        leaves.append(
            Leaf(prefix + (pair,), alternates=(prefix + (f"{pair[:2]}_L{pair[2]}",),))
        )
    leaves.append(Leaf(("rms_values", "line_to_line_voltage", "units"), TEXT))

    leaves.append(Leaf(("frequency_hz",), alternates=(("frequency",),)))
    leaves.append(Leaf(("phase_sequence",), TEXT))

    for a, b in (("L1", "L2"), ("L2", "L3"), ("L3", "L1")):
        leaves.append(
            Leaf(
                ("phase_angles_degrees", f"voltage_{a}_vs_voltage_{b}"),
                alternates=(("phase_angles_degrees", "voltage", f"{a}_{b}"),),
            )
        )
    for phase in PHASES:
        leaves.append(
            Leaf(
                ("phase_angles_degrees", f"voltage_{phase}_vs_current_{phase}"),
                alternates=(("phase_angles_degrees", "voltage_current", phase),),
            )
        )

    flat_totals = {
        "active_power": "active_power_kw",
        "reactive_power": "reactive_power_kvar",
        "apparent_power": "apparent_power_kva",
        "power_factor": "power_factor",
    }
    for quantity, flat_name in flat_totals.items():
        prefix = ("power_analysis", quantity)
        for phase in PHASES:
            alternates = (prefix + (phase.lower(),),)
            if quantity == "power_factor":
                alternates += (("phase_angles_degrees", "power_factor", phase),)
            leaves.append(Leaf(prefix + (phase,), alternates=alternates))
        leaves.append(
            Leaf(prefix + ("total",), alternates=(("power_calculations", flat_name),))
        )
        if quantity != "power_factor":
            leaves.append(Leaf(prefix + ("units",), TEXT))

    for quantity in ("voltage", "current"):
        leaves.append(
            Leaf(
                ("quality_metrics", f"{quantity}_unbalance_percent"),
                alternates=(("quality_metrics", f"{quantity}_unbalance"),),
            )
        )
    for quantity in ("thd_voltage", "thd_current"):
        prefix = ("quality_metrics", quantity)
        for phase in PHASES:
            leaves.append(Leaf(prefix + (phase,), alternates=(prefix + (phase.lower(),),)))
        leaves.append(Leaf(prefix + ("units",), TEXT))

    return tuple(leaves)


LEAVES = _build_leaf_table()


def get_path(data, path: tuple):
    """Walk nested mappings, returning _MISSING when any step is absent."""
    node = data
    for key in path:
        if not isinstance(node, Mapping) or key not in node:
            return _MISSING
        node = node[key]
    return node


def _set_path(data: dict, path: tuple, value) -> None:
    node = data
    for key in path[:-1]:
        node = node.setdefault(key, {})
    node[path[-1]] = value


def is_valid(value, kind: str) -> bool:
    """Present, non-null and of the expected kind (finite number or string)."""
    if value is _MISSING or value is None:
        return False
    if kind == TEXT:
        return isinstance(value, str)
    return is_finite_number(value)


def resolve_leaf(external, leaf: Leaf, fallback):
    """
    Pick the value of one leaf.

    Args:
        external: External analysis mapping (untrusted)
        leaf: Leaf description with candidate paths
        fallback: Baseline value for the leaf

    Returns:
        Tuple of (value, from_external)
    """
    for candidate in leaf.candidates:
        value = get_path(external, candidate)
        if is_valid(value, leaf.kind):
            return (float(value) if leaf.kind == NUMBER else value), True
    return fallback, False


def merge_results(baseline: dict, external=None) -> dict:
    """
    Combine an external analysis with the baseline metrics.

    Args:
        baseline: Complete baseline from build_baseline
        external: External analysis of arbitrary completeness, or None

    Returns:
        New dictionary shaped like the baseline with every covered leaf taken
        from the external analysis when valid, else from the baseline. Narrative
        blocks and unknown top-level keys of the external analysis are passed
        through verbatim.
    """
    if external is not None and not isinstance(external, Mapping):
        logger.warning(
            "Ignoring external analysis of type %s", type(external).__name__
        )
        external = None
    if external is None:
        return copy.deepcopy(baseline)

    covered = {leaf.path[0] for leaf in LEAVES}
    merged = {}

    for key, value in baseline.items():
        if key not in covered:
            merged[key] = copy.deepcopy(value)

    fallbacks = 0
    for leaf in LEAVES:
        baseline_value = get_path(baseline, leaf.path)
        if baseline_value is _MISSING:
            continue
        value, from_external = resolve_leaf(external, leaf, baseline_value)
        if not from_external:
            fallbacks += 1
        _set_path(merged, leaf.path, value)

    logger.debug("Merged external analysis, %d leaves from baseline", fallbacks)

    # Reorder to the baseline layout, external extras after
    result = {key: merged[key] for key in baseline if key in merged}
    for key, value in external.items():
        if key not in result and key != "power_calculations":
            result[key] = copy.deepcopy(value)

    if isinstance(external.get("power_analysis"), Mapping) or isinstance(
        external.get("power_calculations"), Mapping
    ):
        power = result["power_analysis"]
        result["power_calculations"] = {
            "active_power_kw": power["active_power"]["total"],
            "reactive_power_kvar": power["reactive_power"]["total"],
            "apparent_power_kva": power["apparent_power"]["total"],
            "power_factor": power["power_factor"]["total"],
        }

    summary = get_path(external, ("analysis_notes", "summary"))
    if isinstance(summary, str) and "analysis_summary" not in result:
        result["analysis_summary"] = summary

    return result
