"""Example usage of the element matching system with a CSV of broken locators."""

import pandas as pd
import logging
from pathlib import Path
from typing import Optional

from element_matcher.config.models import (
    FieldName,
    HeuristicConfig,
    MatcherConfig,
    StoreConfig
)
from element_matcher.config.rules import (
    PatternRule,
    RequiredAnyFieldRule,
    ValidationRules
)
from element_matcher.core import comparator, heuristic, matcher, service, store


def create_ios_matcher(worker_threads: int = -1) -> matcher.ElementMatcher:
    """
    Create a matcher configured for iOS element descriptors.

    Args:
        worker_threads: Number of threads for batch matching (-1 for CPU count)

    Returns:
        ElementMatcher: Configured matcher instance
    """
    heuristic_matcher = heuristic.HeuristicMatcher(
        HeuristicConfig(
            abbreviations={
                'btn': ['button'],
                'lbl': ['label'],
                'img': ['image'],
                'txt': ['text'],
            }
        )
    )

    # Locators must be XPath expressions when present
    validation_rules = ValidationRules(
        rules=[
            RequiredAnyFieldRule((
                FieldName.ELEMENT_ID,
                FieldName.LOCATOR,
                FieldName.ACCESSIBILITY_ID,
                FieldName.CLASS_NAME,
            )),
            PatternRule(FieldName.LOCATOR, r'^/{1,2}\w', "xpath must start with / or //"),
        ]
    )

    return matcher.ElementMatcher(
        comparator=comparator.AttributeComparator(heuristic=heuristic_matcher),
        validation_rules=validation_rules,
        worker_threads=worker_threads
    )


def heal_csv_file(
    queries_file: Path,
    corpus_file: Path,
    output_file: Optional[Path] = None,
    auto_update: bool = False
) -> pd.DataFrame:
    """
    Match every descriptor in a CSV file against a JSON corpus.

    Args:
        queries_file: CSV with element_id, xpath, accessibility_id, ... columns
        corpus_file: JSON file holding {"test_elements": [...]}
        output_file: Optional path for the result CSV
        auto_update: Whether matches should rewrite the corpus file

    Returns:
        pd.DataFrame: DataFrame with match results
    """
    try:
        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(levelname)s - %(message)s'
        )

        healing_service = service.HealingService(
            store=store.ElementStore(StoreConfig(path=str(corpus_file))),
            config=MatcherConfig(auto_update_enabled=auto_update),
            matcher=create_ios_matcher()
        )

        logging.info(f"Reading queries file: {queries_file}")
        queries = pd.read_csv(queries_file, dtype=str)

        logging.info("Starting matching process...")
        results = healing_service.match_frame(queries)

        total_records = len(results)
        matched_records = results['is_matched'].sum()
        logging.info("\nMatching Statistics:")
        logging.info(f"Total records: {total_records}")
        logging.info(f"Matched records: {matched_records} ({matched_records/total_records*100:.1f}%)")

        logging.info("\nCategory breakdown:")
        for category, count in results['match_category'].value_counts().items():
            avg_score = results[results['match_category'] == category]['match_similarity'].mean()
            logging.info(f"{category}: {count} records, average score: {avg_score:.3f}")

        if output_file:
            logging.info(f"\nSaving results to: {output_file}")
            results.to_csv(output_file, index=False)

        return results

    except Exception as e:
        logging.error(f"An error occurred: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    results_df = heal_csv_file(
        queries_file=Path('data/broken_elements.csv'),
        corpus_file=Path('data/elements.json'),
        output_file=Path('data/healed_elements.csv'),
    )
