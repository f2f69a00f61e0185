"""
interfaces/streamlit_app.py
──────────────────────────────────────────────────────────────────────────────
Streamlit UI for the EI region lookup.

Run:
  streamlit run ei_regions/interfaces/streamlit_app.py

Features:
  • Postal code input → metrics row (region, rate, hours, weeks)
  • Table / JSON tabs
  • CSV download of the result
"""
from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

import pandas as pd
import streamlit as st
from pydantic import ValidationError

# ── Path setup ─────────────────────────────────────────────────────────────
# Allow running from the repo root with: streamlit run ei_regions/interfaces/streamlit_app.py
_REPO_ROOT = Path(__file__).parent.parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from ei_regions.domain.exceptions import EIRegionsError, StoreError
from ei_regions.domain.models import LookupRequest
from ei_regions.services.container import get_services

logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="EI Economic Regions",
    page_icon="🍁",
    layout="wide",
)


# ── Backend singleton ──────────────────────────────────────────────────────

@st.cache_resource(show_spinner="Connecting to the cache store…")
def _load_services():
    """Loads and caches the wired Services for the lifetime of the app."""
    services = get_services()
    services.store.init_schema()
    return services


# ── Result rendering ───────────────────────────────────────────────────────

def _result_to_df(result) -> pd.DataFrame:
    region = result.economic_region_details
    rows = [
        ("Postal Code", result.postal_code),
        ("Census Subdivision", result.census_subdivision_name),
        ("Common Name", result.common_name),
        ("Census Division", result.census_division_name),
        ("EI Economic Region", region.economic_region_name),
        ("Province", region.province),
        ("Region Code", region.economic_region_code),
        ("Unemployment Rate", region.unemployment_rate),
        ("Insured Hours Required", region.insured_hours_required),
        ("Min Weeks Payable", region.min_weeks_payable),
        ("Max Weeks Payable", region.max_weeks_payable),
        ("Best Weeks Required", region.best_weeks_required),
    ]
    return pd.DataFrame(rows, columns=["Field", "Value"])


def _render_result(result) -> None:
    region = result.economic_region_details

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("EI Region", region.economic_region_name)
    c2.metric("Unemployment Rate", region.unemployment_rate)
    c3.metric("Insured Hours", region.insured_hours_required)
    c4.metric("Weeks Payable", f"{region.min_weeks_payable}–{region.max_weeks_payable}")

    st.markdown("---")
    tab_table, tab_json = st.tabs(["📋 Table", "{ } JSON"])

    with tab_table:
        df = _result_to_df(result)
        st.dataframe(df, use_container_width=True, hide_index=True)
        st.download_button(
            "⬇ Download CSV",
            df.to_csv(index=False).encode(),
            file_name=f"ei_region_{result.postal_code}.csv",
            mime="text/csv",
        )

    with tab_json:
        st.json(result.to_dict())


# ── Main ───────────────────────────────────────────────────────────────────

def main() -> None:
    st.title("🍁 EI Economic Region Lookup")
    st.caption(
        "Postal code → Employment Insurance economic region and its current "
        "statistics. Cached for 30 days."
    )

    postal_code = st.text_input("Postal code", placeholder="e.g.  K1A 0A1")
    if not (st.button("Look up", type="primary") and postal_code.strip()):
        st.info("Enter a postal code above and press **Look up**.")
        return

    try:
        request = LookupRequest(postal_code=postal_code)
    except ValidationError as exc:
        st.error(f"Invalid postal code: {exc.errors()[0]['msg']}")
        return

    services = _load_services()
    try:
        with st.spinner("Looking up …"):
            t0 = time.perf_counter()
            result = services.postal_lookup.lookup(request.postal_code)
            elapsed = time.perf_counter() - t0
    except StoreError as exc:
        logger.exception("Cache store failure for %r", postal_code)
        st.error(f"Could not read or write the cache: {exc}")
        return
    except EIRegionsError as exc:
        logger.exception("Lookup failed for %r", postal_code)
        st.error(f"Could not retrieve fresh data: {exc}")
        return

    st.caption(f"Resolved in {elapsed:.2f}s")
    _render_result(result)


if __name__ == "__main__":
    main()
