"""Simple test runner script

You can run this script directly to perform the test"""

import sys
from pathlib import Path

# Add project root directory to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.test_agent import TestFormAgent
from tests.test_calculator import TestTotalsCalculator
from tests.test_entity_store import TestEntityStore
from tests.test_key_normalizer import TestKeyNormalizer
from tests.test_order_model import TestOrderModel
from tests.test_stitcher import TestDocumentComposer
from tests.test_suggestions import TestApplySuggestions, TestRowSuggestions
from tests.test_value_resolver import TestValueResolver
from tests.test_xml_renderer import TestXMLRenderer

TEST_CLASSES = [
    TestOrderModel,
    TestKeyNormalizer,
    TestValueResolver,
    TestEntityStore,
    TestTotalsCalculator,
    TestDocumentComposer,
    TestXMLRenderer,
    TestApplySuggestions,
    TestRowSuggestions,
    TestFormAgent,
]


def main():
    """Run all tests"""
    print("=" * 60)
    print("FormEngine composition and export test")
    print("=" * 60)
    print()

    passed = 0
    failed = 0

    for test_class in TEST_CLASSES:
        # Get all test methods
        test_methods = [method for method in dir(test_class) if method.startswith('test_')]
        for test_method_name in test_methods:
            # Fresh instance per method, as pytest does
            test_instance = test_class()
            test_instance.setup_method()
            test_method = getattr(test_instance, test_method_name)
            print(f"Run test: {test_class.__name__}.{test_method_name}...", end=" ")

            try:
                test_method()
                print("✓ Pass")
                passed += 1
            except AssertionError as e:
                print(f"✗ Failure: {e}")
                failed += 1
            except Exception as e:
                print(f"✗ Error: {e}")
                failed += 1

    print()
    print("=" * 60)
    print(f"Test results: {passed} passed, {failed} failed")
    print("=" * 60)

    if failed > 0:
        sys.exit(1)
    else:
        sys.exit(0)


if __name__ == "__main__":
    main()
