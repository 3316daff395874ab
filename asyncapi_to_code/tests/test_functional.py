"""
Functional tests for the resolution pipeline.

Each case in test_data/functional/*_tests.json names a contract, a
configuration and the handlers the contract must resolve to.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from asyncapi_to_code.pipeline import GeneratorConfig, PipelineGenerator, load_contract

TEST_DATA = Path(__file__).parent / "test_data"


def load_all_test_cases():
    """Load all test cases from all JSON files in test_data/functional directory."""
    test_cases = []
    for json_file in sorted((TEST_DATA / "functional").glob("*_tests.json")):
        with open(json_file) as f:
            data = json.load(f)

        for test_case in data:
            test_case["_source_file"] = json_file.name
            test_cases.append(test_case)

    return test_cases


@pytest.mark.parametrize("test_case", load_all_test_cases(), ids=lambda case: case["name"])
def test_functional_resolution(test_case):
    contract = load_contract(TEST_DATA / "contracts" / test_case["contract"])
    ir = PipelineGenerator(contract, GeneratorConfig.from_dict(test_case["config"])).generate()

    handlers = [[handler.name, handler.kind.value] for handler in ir.handlers]
    assert handlers == test_case["handlers"], f"{test_case['_source_file']}: {test_case['name']}"
    assert ir.application_properties["spring.cloud.function.definition"] == test_case["definition"]


if __name__ == "__main__":
    pytest.main([__file__])
