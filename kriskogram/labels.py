"""Display labels for flow metrics, aggregate fields and attribute keys."""

import re

FLOW_MODE_LABELS = {
    "visible_incoming": "Visible Incoming Flow",
    "visible_outgoing": "Visible Outgoing Flow",
    "year_incoming": "Total Incoming Flow (Year)",
    "year_outgoing": "Total Outgoing Flow (Year)",
    "net_visible": "Visible Net Flow",
    "net_year": "Total Net Flow (Year)",
    "self_year": "Self Flow (Year)",
}

# NodeAggregates field names
FLOW_FIELD_LABELS = {
    "visible_incoming": FLOW_MODE_LABELS["visible_incoming"],
    "visible_outgoing": FLOW_MODE_LABELS["visible_outgoing"],
    "year_incoming": FLOW_MODE_LABELS["year_incoming"],
    "year_outgoing": FLOW_MODE_LABELS["year_outgoing"],
    "net_visible": FLOW_MODE_LABELS["net_visible"],
    "net_year": FLOW_MODE_LABELS["net_year"],
    "self_flow_year": FLOW_MODE_LABELS["self_year"],
    "overlay_past_total": "Overlay Past Total",
    "overlay_future_total": "Overlay Future Total",
    "overlay_delta": "Overlay Δ (Future - Past)",
}

GENERAL_LABEL_OVERRIDES = {
    "id": "ID",
    "label": "Label",
    "value": "Migrants",
    "moe": "Margin of Error (MOE)",
}


def title_case(value: str) -> str:
    """``"net_flow-year"`` -> ``"Net Flow Year"``."""
    spaced = re.sub(r"\s+", " ", re.sub(r"[_-]+", " ", value)).strip()
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced)


def flow_mode_label(mode: str) -> str:
    return FLOW_MODE_LABELS.get(mode) or title_case(mode)


def field_label(name: str) -> str:
    if name in FLOW_FIELD_LABELS:
        return FLOW_FIELD_LABELS[name]
    if name in GENERAL_LABEL_OVERRIDES:
        return GENERAL_LABEL_OVERRIDES[name]
    return title_case(name.replace(".", " "))
