#!/usr/bin/env python3

"""
Unit tests for canonical descriptor ordering.
"""

import random
import unittest
import sys
import os

# Add the parent directory to the path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../..')))

from rna_check_pipeline.core.data_structures import EvidenceType
from rna_check_pipeline.core.ordering import (
    natural_key, descriptor_sort_key, compare_descriptors, sort_descriptors
)
from rna_check_pipeline.tests.fakes import make_descriptor


class TestNaturalKey(unittest.TestCase):
    """Test natural alphanumeric ordering."""

    def test_numeric_runs_compare_by_value(self):
        self.assertLess(natural_key("genome.9"), natural_key("genome.10"))
        self.assertLess(natural_key("9.1"), natural_key("10.1"))
        self.assertLess(natural_key("contig2"), natural_key("contig10"))
        # Plain string comparison gets these wrong
        self.assertGreater("9.1", "10.1")

    def test_text_prefixes(self):
        self.assertLess(natural_key("abc"), natural_key("abd"))
        self.assertLess(natural_key("10"), natural_key("a"))

    def test_equal_values_with_different_spelling_are_distinct(self):
        """Zero-padded numbers still order consistently against each other."""
        self.assertNotEqual(natural_key("7"), natural_key("007"))
        self.assertEqual(natural_key("7"), natural_key("7"))


class TestDescriptorOrdering(unittest.TestCase):
    """Test the canonical descriptor ordering."""

    def test_genome_ids_sort_naturally(self):
        """A locus in genome 9.1 sorts before the same locus in genome 10.1."""
        d9 = make_descriptor(500, 1900, genome_id="9.1")
        d10 = make_descriptor(500, 1900, genome_id="10.1")
        self.assertEqual(sort_descriptors([d10, d9]), [d9, d10])
        self.assertEqual(compare_descriptors(d9, d10), -1)

    def test_position_then_strand(self):
        """Forward strand sorts before reverse at the same position."""
        forward = make_descriptor(100, 200, "+")
        reverse = make_descriptor(100, 200, "-")
        later = make_descriptor(150, 160, "+")
        self.assertEqual(sort_descriptors([later, reverse, forward]), [forward, reverse, later])

    def test_contigs_sort_naturally(self):
        c2 = make_descriptor(100, 200, contig="contig2")
        c10 = make_descriptor(50, 60, contig="contig10")
        self.assertEqual(sort_descriptors([c10, c2]), [c2, c10])

    def test_homology_hits_before_annotations(self):
        annotation = make_descriptor(100, 200, evidence_type=EvidenceType.ANNOTATION)
        hit = make_descriptor(100, 200, evidence_type=EvidenceType.HOMOLOGY_HIT)
        self.assertEqual(sort_descriptors([annotation, hit]), [hit, annotation])

    def test_description_breaks_ties(self):
        a = make_descriptor(100, 200, description="Bacteria;A")
        b = make_descriptor(100, 200, description="Bacteria;B")
        self.assertEqual(sort_descriptors([b, a]), [a, b])
        self.assertEqual(compare_descriptors(a, a), 0)

    def test_distinct_loci_never_tie(self):
        """Every pair of distinct descriptors compares unequal."""
        descriptors = [
            make_descriptor(100, 200), make_descriptor(100, 201),
            make_descriptor(100, 200, "-"), make_descriptor(100, 200, contig="contig2"),
            make_descriptor(100, 200, evidence_type=EvidenceType.ANNOTATION),
            make_descriptor(100, 200, description="other"),
            make_descriptor(100, 200, genome_id="83333.10"),
        ]
        for i, a in enumerate(descriptors):
            for b in descriptors[i + 1:]:
                self.assertNotEqual(compare_descriptors(a, b), 0, f"{a} ties with {b}")

    def test_sort_is_idempotent(self):
        """Sorting an already sorted list leaves it unchanged."""
        rng = random.Random(17)
        descriptors = [
            make_descriptor(start, start + rng.randint(0, 500), rng.choice("+-"),
                            contig=f"contig{rng.randint(1, 12)}",
                            evidence_type=rng.choice(list(EvidenceType)),
                            genome_id=f"{rng.randint(1, 20)}.1")
            for start in (rng.randint(1, 5000) for _ in range(60))
        ]
        once = sort_descriptors(descriptors)
        self.assertEqual(sort_descriptors(once), once)

    def test_order_independent_of_arrival(self):
        descriptors = [make_descriptor(s, s + 10, genome_id=g)
                       for g in ("2.1", "10.1", "1.1") for s in (900, 10, 400)]
        expected = sort_descriptors(descriptors)
        shuffled = list(descriptors)
        random.Random(3).shuffle(shuffled)
        self.assertEqual(sort_descriptors(shuffled), expected)
        self.assertEqual(expected[0].genome_id, "1.1")
        self.assertEqual(expected[-1].genome_id, "10.1")

    def test_sort_key_leads_with_genome_id(self):
        self.assertEqual(descriptor_sort_key(make_descriptor(1, 2))[0], natural_key("83333.1"))


if __name__ == "__main__":
    unittest.main()
