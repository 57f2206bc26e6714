import streamlit as st
import pandas as pd
import numpy as np
from datetime import datetime

from tacsim import (
    SAMPLE_TYPES,
    SAMPLE_TYPE_NTC,
    CardEmitter,
    CardQualityControl,
    ConfigurationError,
    MemoryCardWriter,
    SimulationConfig,
    SimulationConstants,
    build_sample_sheet,
    create_card_heatmap,
    export_dataset_to_excel,
    generate_enumeration_table,
    generate_household_survey,
    household_ids,
    natural_sort_key,
)

FIELD_SAMPLE_TYPES = [t for t in SAMPLE_TYPES if t != SAMPLE_TYPE_NTC]


# ==================== GENERATION ====================
def run_generation(settings: dict, clock=None):
    """Generate survey, enumeration and card tables from sidebar settings.

    Returns a dict of tables, or None after reporting a configuration problem.
    """
    try:
        config = SimulationConfig.from_dict(settings)
        households = household_ids(int(settings.get("n_households", 10)))
        samples = build_sample_sheet(
            households, settings.get("sample_types") or FIELD_SAMPLE_TYPES
        )

        # Independent streams for the survey, the enumeration and the cards
        survey_seq, enumeration_seq, card_seq = np.random.SeedSequence(config.seed).spawn(3)
        survey = generate_household_survey(households, np.random.default_rng(survey_seq))
        enumeration = generate_enumeration_table(
            samples, np.random.default_rng(enumeration_seq)
        )

        writer = MemoryCardWriter()
        emitter = CardEmitter(config=config, writer=writer, clock=clock)
        names = emitter.emit_all(samples, seed=card_seq)
    except ConfigurationError as e:
        st.error(f"Configuration error: {e}")
        return None

    all_rows = (
        pd.concat(writer.tables.values(), ignore_index=True)
        if writer.tables
        else pd.DataFrame()
    )

    params = {
        "Date": datetime.now().strftime("%Y-%m-%d %H:%M"),
        "Households": len(households),
        "Samples": len(samples),
        "Cards": len(names),
        "Card_Capacity": config.capacity,
        "Probability_Cap": config.probability_cap,
        "P_Inconclusive": config.p_inconclusive,
        "Seed": config.seed if config.seed is not None else "random",
        "Label": config.label,
    }

    return {
        "samples": samples,
        "survey": survey,
        "enumeration": enumeration,
        "cards": writer.tables,
        "names": names,
        "all_rows": all_rows,
        "qc_stats": CardQualityControl.get_card_summary_stats(all_rows),
        "params": params,
    }


# ==================== PAGE CONFIG ====================
st.set_page_config(page_title="TAC Training Dataset Simulator", layout="wide", initial_sidebar_state="expanded")

# ==================== SESSION STATE INIT ====================
if "dataset" not in st.session_state:
    st.session_state["dataset"] = None

# ==================== SIDEBAR ====================
with st.sidebar:
    st.header("⚙️ Generation Settings")
    n_households = st.number_input("Households", min_value=1, max_value=500, value=20, step=1)
    sample_types = st.multiselect("Sample types", FIELD_SAMPLE_TYPES, default=FIELD_SAMPLE_TYPES)
    capacity = st.number_input(
        "Samples per card", min_value=1, max_value=16, value=SimulationConstants.CARD_CAPACITY, step=1
    )
    probability_cap = st.slider(
        "Detection probability cap", 0.0, 1.0, SimulationConstants.PROBABILITY_CAP, 0.01
    )
    p_inconclusive = st.slider(
        "Inconclusive call rate", 0.0, 1.0, SimulationConstants.P_INCONCLUSIVE, 0.01
    )
    seed = st.number_input("Random seed", min_value=0, value=42, step=1)
    label = st.text_input("Card label", value=SimulationConstants.CARD_LABEL)

    if st.button("▶️ Generate Dataset", type="primary"):
        with st.spinner("Simulating cards..."):
            st.session_state["dataset"] = run_generation(
                {
                    "n_households": n_households,
                    "sample_types": sample_types,
                    "capacity": int(capacity),
                    "probability_cap": float(probability_cap),
                    "p_inconclusive": float(p_inconclusive),
                    "seed": int(seed),
                    "label": label or SimulationConstants.CARD_LABEL,
                }
            )
        if st.session_state["dataset"] is not None:
            st.success(f"Generated {len(st.session_state['dataset']['names'])} cards")

st.title("🧪 TAC Training Dataset Simulator")

tab1, tab2, tab3, tab4, tab5 = st.tabs(
    ["🏠 Household Survey", "🧫 Enumeration", "🧬 Array Cards", "✅ QC", "📤 Export"]
)
dataset = st.session_state["dataset"]

# ==================== TAB 1: SURVEY ====================
with tab1:
    if dataset:
        st.dataframe(dataset["survey"], use_container_width=True)
    else:
        st.info("⏳ No dataset yet. Choose settings in the sidebar and click 'Generate Dataset'")

# ==================== TAB 2: ENUMERATION ====================
with tab2:
    if dataset:
        st.caption("Quanti-Tray counts (49 large / 48 small wells), MPN per 100 mL after dilution")
        st.dataframe(dataset["enumeration"], use_container_width=True)
    else:
        st.info("⏳ No dataset yet.")

# ==================== TAB 3: CARDS ====================
with tab3:
    if dataset and dataset["cards"]:
        card_name = st.selectbox("Card", list(dataset["cards"].keys()))
        if card_name:
            card_frame = dataset["cards"][card_name]
            st.dataframe(card_frame, use_container_width=True)

            card_samples = sorted(card_frame["Sample"].unique(), key=natural_sort_key)
            heatmap_sample = st.selectbox("Sample layout", card_samples)
            if heatmap_sample:
                st.plotly_chart(
                    create_card_heatmap(card_frame, heatmap_sample),
                    use_container_width=True,
                )
    else:
        st.info("⏳ No cards generated yet.")

# ==================== TAB 4: QC ====================
with tab4:
    if dataset and dataset["qc_stats"]:
        qc = dataset["qc_stats"]
        metric_cols = st.columns(3)
        metric_cols[0].metric("Positivity", f"{qc['positivity_pct']}%")
        metric_cols[1].metric("Contaminated NTC wells", qc["ntc_contaminated"])
        metric_cols[2].metric("Invariant violations", qc["invariant_violations"])

        if qc["ntc_contaminated"]:
            st.warning("No-template controls returned positive calls")

        st.subheader("Positivity by target")
        st.dataframe(
            CardQualityControl.positivity_summary(dataset["all_rows"]),
            use_container_width=True,
        )
    else:
        st.info("⏳ No dataset yet.")

# ==================== TAB 5: EXPORT ====================
with tab5:
    if dataset:
        st.subheader("📦 Download Options")

        excel_data = export_dataset_to_excel(
            dataset["cards"],
            survey=dataset["survey"],
            enumeration=dataset["enumeration"],
            params=dataset["params"],
            qc_stats=dataset["qc_stats"],
        )
        st.download_button(
            label="📥 Download Excel Workbook",
            data=excel_data,
            file_name=f"TAC_training_dataset_{datetime.now().strftime('%Y%m%d_%H%M')}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            type="primary",
        )

        st.markdown("### 🧬 Card Result Files")
        for name, frame in dataset["cards"].items():
            st.download_button(
                label=f"📥 {name}",
                data=frame.to_csv(index=False).encode("utf-8"),
                file_name=name,
                mime="text/csv",
                key=f"dl_{name}",
            )
    else:
        st.info("⏳ No dataset yet.")

# ==================== FOOTER ====================
st.markdown("---")
st.caption("Synthetic data for analyst training only. Not derived from real samples.")
