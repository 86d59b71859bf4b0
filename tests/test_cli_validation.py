import json
from pathlib import Path

from .helpers import (
    CONVERGING_CORPUS,
    STALLING_CORPUS,
    run_clarkphase,
    write_genotype_matrix,
    write_vcf,
)


CONVERGING_REPORT = [
    "Initial common haplotype: 121",
    "After 2 run(s), haplotype list has 3 entries and generates 3 genotypes; "
    "still missing 0 genotypes",
]


def _dosage_to_gt(code: int) -> str:
    return {0: "0/0", 1: "0/1", 2: "1/1"}[code]


def test_missing_input_argument_prints_usage():
    res = run_clarkphase(check=False)
    assert res.returncode == 2
    assert "usage" in res.stderr.lower()
    assert res.stdout == ""


def test_extra_positional_argument_prints_usage(tmp_path: Path):
    path = write_genotype_matrix(tmp_path / "g.txt", CONVERGING_CORPUS)
    res = run_clarkphase(path, tmp_path / "other.txt", check=False)
    assert res.returncode == 2
    assert "usage" in res.stderr.lower()


def test_nonexistent_input_errors(tmp_path: Path):
    res = run_clarkphase(tmp_path / "absent.txt", check=False)
    assert res.returncode != 0
    assert "Input file not found" in res.stderr


def test_zero_max_iterations_errors(tmp_path: Path):
    path = write_genotype_matrix(tmp_path / "g.txt", CONVERGING_CORPUS)
    res = run_clarkphase(path, "-mi", "0", check=False)
    assert res.returncode != 0
    assert "must be >= 1" in res.stderr


def test_zero_consensus_fallback_errors(tmp_path: Path):
    path = write_genotype_matrix(tmp_path / "g.txt", CONVERGING_CORPUS)
    res = run_clarkphase(path, "-cf", "0", check=False)
    assert res.returncode != 0
    assert "consensus fallback" in res.stderr


def test_converging_corpus_report(tmp_path: Path):
    path = write_genotype_matrix(tmp_path / "g.txt", CONVERGING_CORPUS)
    res = run_clarkphase(path)
    assert res.stdout.splitlines() == CONVERGING_REPORT
    assert "[INFO] Loaded 3 genotypes with 3 loci" in res.stderr


def test_non_convergence_reports_escalations_and_exits_nonzero(tmp_path: Path):
    path = write_genotype_matrix(tmp_path / "g.txt", STALLING_CORPUS)
    out_dir = tmp_path / "out"
    res = run_clarkphase(path, "-o", out_dir, check=False)
    assert res.returncode == 1
    assert "Phasing did not converge" in res.stderr
    assert res.stdout.splitlines() == [
        "Initial common haplotype: 222",
        "Adding another common haplotype (from 0 generated): 222",
        "Adding another common haplotype (from 0 generated): 222",
    ]
    assert not (out_dir / "haplotypes.tsv").exists()


def test_inconsistent_input_exits_nonzero(tmp_path: Path):
    path = tmp_path / "g.txt"
    path.write_text("0 1 2\n0 1 3\n")
    res = run_clarkphase(path, check=False)
    assert res.returncode == 1
    assert "Invalid input" in res.stderr
    assert res.stdout == ""


def test_non_utf8_input_exits_without_traceback(tmp_path: Path):
    path = tmp_path / "g.txt"
    path.write_bytes(b"\xff\xfe 0 1 2\n")
    res = run_clarkphase(path, check=False)
    assert res.returncode == 1
    assert "ERROR: Failed to read" in res.stderr
    assert "Traceback" not in res.stderr


def test_output_files(tmp_path: Path):
    path = write_genotype_matrix(
        tmp_path / "g.txt", CONVERGING_CORPUS, names=["S1", "S2", "S3"]
    )
    out_dir = tmp_path / "out"
    run_clarkphase(path, "-o", out_dir, "-q")

    haplotypes = (out_dir / "haplotypes.tsv").read_text().splitlines()
    assert haplotypes == [
        "index\torigin\thaplotype",
        "1\tseed\t121",
        "2\tderived\t000",
        "3\tderived\t000",
    ]

    phased = (out_dir / "phased_genotypes.tsv").read_text().splitlines()
    assert phased == [
        "sample\tgenotype\thaplotype_a\thaplotype_b",
        "S1\t000\t2\t3",
        "S2\t121\t1\t2",
        "S3\t000\t2\t3",
    ]

    run_info = (out_dir / "run_info.txt").read_text()
    assert "Number of genotypes: 3" in run_info
    assert "Heterozygous calls: 2" in run_info
    assert "Consensus escalations: 0" in run_info
    assert "Genotypes missing: 0" in run_info


def test_vcf_input(tmp_path: Path):
    samples = ["S1", "S2", "S3"]
    variants = [
        {
            "id": f"rs{locus + 1}",
            "genotypes": [_dosage_to_gt(row[locus]) for row in CONVERGING_CORPUS],
        }
        for locus in range(3)
    ]
    ivcf = write_vcf(tmp_path / "calls.vcf", samples, variants)
    res = run_clarkphase(ivcf, "-q")
    assert res.stdout.splitlines() == CONVERGING_REPORT


def test_quiet_suppresses_info_logs(tmp_path: Path):
    path = write_genotype_matrix(tmp_path / "g.txt", CONVERGING_CORPUS)
    res = run_clarkphase(path, "-q")
    assert "[INFO]" not in res.stderr
    assert res.stdout.splitlines() == CONVERGING_REPORT


def test_json_log_format(tmp_path: Path):
    path = write_genotype_matrix(tmp_path / "g.txt", CONVERGING_CORPUS)
    res = run_clarkphase(path, "-F", "json", "-L", "INFO")
    records = [json.loads(line) for line in res.stderr.splitlines() if line.startswith("{")]
    assert records
    assert all({"level", "logger", "message", "time"} <= set(r) for r in records)
    assert any("Loaded 3 genotypes" in r["message"] for r in records)
    assert res.stdout.splitlines() == CONVERGING_REPORT


def test_version_flag():
    res = run_clarkphase("-V")
    assert res.stdout.startswith("clarkphase ")
