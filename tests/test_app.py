"""
Tests for the Streamlit front end.

The script is imported against the mocked streamlit module from conftest;
generation itself is exercised through run_generation.
"""

from importlib import import_module

FRONT_END_MODULE = "streamlit tac simulator"


class TestFrontEndImport:
    def test_imports_without_runtime(self, mock_streamlit):
        app = import_module(FRONT_END_MODULE)

        assert callable(app.run_generation)
        assert mock_streamlit.session_state["dataset"] is None
        mock_streamlit.set_page_config.assert_called_once()

    def test_prompts_for_generation_when_empty(self, mock_streamlit):
        import_module(FRONT_END_MODULE)
        assert mock_streamlit.info.called


class TestRunGeneration:
    def test_generates_linked_tables(self, mock_streamlit, fixed_clock):
        app = import_module(FRONT_END_MODULE)

        dataset = app.run_generation(
            {"n_households": 3, "capacity": 4, "seed": 5, "label": "TAC"},
            clock=fixed_clock,
        )

        assert len(dataset["samples"]) == 9
        assert len(dataset["names"]) == 3
        assert list(dataset["cards"]) == dataset["names"]
        assert len(dataset["survey"]) == 3
        assert len(dataset["enumeration"]) == 9
        assert dataset["qc_stats"]["invariant_violations"] == 0
        assert dataset["qc_stats"]["ntc_samples"] == 3
        assert dataset["params"]["Cards"] == 3

    def test_same_seed_same_dataset(self, mock_streamlit, fixed_clock):
        app = import_module(FRONT_END_MODULE)
        settings = {"n_households": 4, "sample_types": ["effluent", "produce"], "seed": 17}

        first = app.run_generation(settings, clock=fixed_clock)
        second = app.run_generation(settings, clock=fixed_clock)

        assert first["survey"].equals(second["survey"])
        assert first["enumeration"].equals(second["enumeration"])
        assert first["all_rows"].equals(second["all_rows"])

    def test_configuration_error_reported(self, mock_streamlit, fixed_clock):
        app = import_module(FRONT_END_MODULE)

        dataset = app.run_generation({"n_households": 3, "capacity": 0}, clock=fixed_clock)

        assert dataset is None
        mock_streamlit.error.assert_called_once()
