"""Tests for SNP sequence types and the dosage encoding."""

import itertools

import numpy as np
import pytest

from clarkphase.core.sequences import (
    DosageEncoding,
    Genotype,
    Haplotype,
    HaplotypeSet,
    InputConsistencyError,
    combine,
    derive_parent,
    stack_sequences,
    validate_corpus,
)


ALL_HAPLOTYPES = [Haplotype(bits) for bits in itertools.product([0, 1], repeat=3)]


class TestSNPSequence:
    def test_value_equality_and_hash(self):
        a = Haplotype([0, 1, 1])
        b = Haplotype(np.array([0, 1, 1]))
        assert a == b
        assert a is not b
        assert hash(a) == hash(b)
        assert len({a, b, Haplotype([1, 1, 0])}) == 2

    def test_genotype_never_equals_haplotype(self):
        assert Genotype([0, 1]) != Haplotype([0, 1])

    def test_locus_vector_is_read_only(self):
        g = Genotype([0, 1, 2])
        with pytest.raises(ValueError):
            g.snps[0] = 2

    def test_does_not_alias_caller_array(self):
        source = np.array([0, 1, 2])
        g = Genotype(source)
        source[0] = 2
        assert g[0] == 0

    def test_sequence_protocol(self):
        g = Genotype([2, 0, 1])
        assert len(g) == 3
        assert g[0] == 2
        assert list(g) == [2, 0, 1]
        assert str(g) == "201"
        assert repr(g) == "Genotype('201')"

    @pytest.mark.parametrize(
        "bad",
        [[], [-1, 0], [0.5, 1.0], ["0", "1"], [[0, 1], [1, 0]], [0, 2**40]],
    )
    def test_invalid_locus_vectors_rejected(self, bad):
        with pytest.raises(InputConsistencyError):
            Genotype(bad)


class TestCombination:
    def test_additive_dosage(self):
        assert combine(Haplotype([0, 1, 1]), Haplotype([0, 0, 1])) == Genotype([0, 1, 2])

    def test_combine_is_commutative(self):
        for a, b in itertools.product(ALL_HAPLOTYPES, repeat=2):
            assert a.combine_with(b) == b.combine_with(a)

    def test_summed_dosages_do_not_wrap(self):
        wide = Haplotype([120, 1])
        assert combine(wide, wide) == Genotype([240, 2])
        assert str(wide) == "120 1"

    def test_combine_rejects_length_mismatch(self):
        with pytest.raises(InputConsistencyError):
            combine(Haplotype([0, 1]), Haplotype([0, 1, 1]))


class TestParentDerivation:
    def test_heterozygous_loci_take_the_complement(self):
        g = Genotype([1, 1, 1])
        assert g.parent_pair_of(Haplotype([0, 1, 0])) == Haplotype([1, 0, 1])

    def test_homozygous_loci_force_the_same_allele(self):
        g = Genotype([2, 1, 0])
        assert g.parent_pair_of(Haplotype([1, 0, 0])) == Haplotype([1, 1, 0])
        assert g.parent_pair_of(Haplotype([1, 1, 0])) == Haplotype([1, 0, 0])

    def test_inconsistent_haplotype_has_no_parent(self):
        g = Genotype([2, 1, 0])
        assert g.parent_pair_of(Haplotype([0, 0, 0])) is None
        assert g.parent_pair_of(Haplotype([1, 0, 1])) is None

    def test_consensus_haplotype_derives_only_from_its_own_genotype(self):
        consensus = Haplotype([2, 2, 2])
        assert derive_parent(Genotype([2, 1, 0]), consensus) is None
        assert derive_parent(Genotype([2, 2, 2]), consensus) == Haplotype([0, 0, 0])

    def test_derived_parent_recombines_into_genotype(self):
        for g_codes in itertools.product([0, 1, 2], repeat=3):
            g = Genotype(g_codes)
            for h in ALL_HAPLOTYPES:
                parent = derive_parent(g, h)
                if parent is not None:
                    assert combine(h, parent) == g

    def test_every_genotype_has_some_consistent_haplotype(self):
        for g_codes in itertools.product([0, 1, 2], repeat=3):
            g = Genotype(g_codes)
            assert any(derive_parent(g, h) is not None for h in ALL_HAPLOTYPES)


class TestCorpusValidation:
    def test_stack_rejects_mixed_lengths(self):
        with pytest.raises(InputConsistencyError, match="Genotype 2 has 2 loci"):
            stack_sequences([Genotype([0, 1, 2]), Genotype([0, 1])])

    def test_empty_corpus_rejected(self):
        with pytest.raises(InputConsistencyError):
            validate_corpus([])

    def test_codes_outside_encoding_rejected(self):
        with pytest.raises(InputConsistencyError, match="code 3 at locus 2"):
            validate_corpus([Genotype([0, 1]), Genotype([1, 3])])

    def test_custom_alphabet(self):
        encoding = DosageEncoding(genotype_codes=(0, 1, 2, 3))
        corpus = validate_corpus([Genotype([0, 3])], encoding)
        assert corpus == (Genotype([0, 3]),)


class TestHaplotypeSet:
    def test_append_keeps_order_duplicates_and_origins(self):
        haps = HaplotypeSet()
        haps.append(Haplotype([0, 0]), HaplotypeSet.SEED)
        haps.append(Haplotype([0, 0]))
        haps.append(Haplotype([1, 0]), HaplotypeSet.CONSENSUS)
        assert len(haps) == 3
        assert list(haps) == [Haplotype([0, 0]), Haplotype([0, 0]), Haplotype([1, 0])]
        assert haps.origins == ("seed", "derived", "consensus")

    def test_matrix_tracks_appends(self):
        haps = HaplotypeSet()
        haps.append(Haplotype([0, 1]))
        assert haps.as_matrix().shape == (1, 2)
        haps.append(Haplotype([1, 1]))
        assert haps.as_matrix().tolist() == [[0, 1], [1, 1]]

    def test_append_rejects_length_mismatch(self):
        haps = HaplotypeSet()
        haps.append(Haplotype([0, 1]))
        with pytest.raises(InputConsistencyError):
            haps.append(Haplotype([0, 1, 1]))
