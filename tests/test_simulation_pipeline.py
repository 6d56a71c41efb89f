"""End-to-end tests of the simulation pipeline and the command-line entry point."""

import os
import sys

import numpy as np
import pandas as pd
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from create_test_vcf import create_vcf_file  # noqa: E402
from founderfit.cli.simulate import main  # noqa: E402
from founderfit.data.load_vcf import load_vcf_targets  # noqa: E402
from founderfit.dosages import l1_distance  # noqa: E402
from founderfit.pipelines.simulation import SimulationPipeline  # noqa: E402
from founderfit.utils.config import SimulationConfig  # noqa: E402


@pytest.fixture
def input_vcf(tmp_path):
    path = tmp_path / "real.vcf"
    create_vcf_file(str(path), n_samples=12, num_markers=6, ploidy=4, multiallelic_rate=0.0, seed=7)
    return path


def _run(input_vcf, tmp_path, method, **overrides):
    config = SimulationConfig(
        input_vcf=str(input_vcf),
        output_vcf=str(tmp_path / f"sim_{method}.vcf"),
        ploidy=4,
        n_founders=5,
        n_samples=8,
        seed=3,
        method=method,
        verbose=False,
        **overrides,
    )
    pipeline = SimulationPipeline(config)
    pipeline.run()
    return pipeline


def test_descent_pipeline_writes_population(input_vcf, tmp_path) -> None:
    pipeline = _run(input_vcf, tmp_path, 'descent')

    assert pipeline.haplotype_map.shape == (8, 4)
    assert pipeline.multiplicities.sum() == 32
    assert (pipeline.multiplicities >= 1).all()
    assert pipeline.founder_alleles.shape == (6, 5)
    assert pipeline.summary.n_markers == 6

    achieved = pipeline.achieved_distributions()
    np.testing.assert_allclose(achieved.sum(axis=1), 8)
    expected = [l1_distance(t, a) for t, a in zip(pipeline.targets, achieved)]
    np.testing.assert_allclose(pipeline.summary.distances, expected)

    simulated = load_vcf_targets(tmp_path / "sim_descent.vcf", ploidy=4)
    assert simulated.sample_ids == [f"SAMPLE_{i}" for i in range(8)]
    assert simulated.contigs == ["chr1", "chr2", "chr3"]
    np.testing.assert_array_equal(simulated.dosages, achieved)
    assert list(simulated.marker_map.positions) == list(pipeline.data.marker_map.positions)


def test_mip_is_never_worse_than_descent(input_vcf, tmp_path) -> None:
    descent = _run(input_vcf, tmp_path, 'descent')
    mip = _run(input_vcf, tmp_path, 'mip')

    np.testing.assert_array_equal(descent.haplotype_map, mip.haplotype_map)
    assert np.all(mip.summary.distances <= descent.summary.distances + 1e-5)
    achieved = mip.achieved_distributions()
    expected = [l1_distance(t, a) for t, a in zip(mip.targets, achieved)]
    np.testing.assert_allclose(mip.summary.distances, expected, atol=1e-5)


def test_same_seed_reproduces_population(input_vcf, tmp_path) -> None:
    first = _run(input_vcf, tmp_path, 'descent')
    first_text = (tmp_path / "sim_descent.vcf").read_text()
    second = _run(input_vcf, tmp_path, 'descent')

    np.testing.assert_array_equal(first.founder_alleles, second.founder_alleles)
    assert (tmp_path / "sim_descent.vcf").read_text() == first_text


def test_marker_limit_and_report(input_vcf, tmp_path) -> None:
    report = tmp_path / "fit.tsv"
    pipeline = _run(input_vcf, tmp_path, 'descent', n_markers=3, report=str(report))

    assert pipeline.targets.shape == (3, 5)
    table = pd.read_csv(report, sep='\t')
    assert len(table) == 3
    np.testing.assert_allclose(table['DISTANCE'], pipeline.summary.distances, rtol=1e-5)
    np.testing.assert_allclose(table[[f'TARGET_{p}' for p in range(5)]].sum(axis=1), 8, rtol=1e-5)


def test_samples_default_to_input_count(input_vcf, tmp_path) -> None:
    config = SimulationConfig(
        input_vcf=str(input_vcf),
        output_vcf=str(tmp_path / "sim.vcf"),
        n_founders=2,
        verbose=False,
    )
    pipeline = SimulationPipeline(config)
    pipeline.run()
    assert pipeline.n_samples == 12
    assert pipeline.haplotype_map.shape == (12, 4)


def test_steps_must_run_in_order(input_vcf) -> None:
    pipeline = SimulationPipeline(SimulationConfig(input_vcf=str(input_vcf), verbose=False))
    with pytest.raises(ValueError):
        pipeline.simulate_population()
    with pytest.raises(ValueError):
        pipeline.fit()
    with pytest.raises(ValueError):
        pipeline.write()


def test_cli_runs_and_writes_output(input_vcf, tmp_path) -> None:
    out = tmp_path / "cli.vcf.gz"
    status = main(["-i", str(input_vcf), "-o", str(out), "-f", "4", "-s", "6", "-g", "1", "-q"])
    assert status == 0
    simulated = load_vcf_targets(out, ploidy=4)
    assert simulated.n_samples == 6
    assert simulated.n_markers == 6


def test_cli_reports_ploidy_mismatch(input_vcf, tmp_path, capsys) -> None:
    out = tmp_path / "never.vcf"
    status = main(["-i", str(input_vcf), "-o", str(out), "-p", "2", "-q"])
    assert status == 1
    assert not out.exists()
    assert "ploidy" in capsys.readouterr().err


def test_cli_reports_too_many_founders(input_vcf, tmp_path, capsys) -> None:
    status = main(["-i", str(input_vcf), "-o", str(tmp_path / "x.vcf"), "-f", "100", "-s", "2", "-q"])
    assert status == 1
    assert "haplotype slots" in capsys.readouterr().err


def test_verbose_run_logs_to_stderr_only(input_vcf, tmp_path, capsys) -> None:
    config = SimulationConfig(
        input_vcf=str(input_vcf),
        output_vcf=str(tmp_path / "sim.vcf"),
        n_founders=5,
        n_samples=8,
        seed=3,
        log_markers=True,
    )
    pipeline = SimulationPipeline(config)
    capsys.readouterr()
    pipeline.run()

    captured = capsys.readouterr()
    assert captured.out == ""
    assert f"Founder multiplicities: {pipeline.multiplicities.tolist()}" in captured.err
    assert "Input dosages @ chr1:10000" in captured.err
    assert "Marker 5:" in captured.err


def test_worker_pass_matches_sequential_with_marker_logging(input_vcf, tmp_path) -> None:
    sequential = _run(input_vcf, tmp_path, 'descent')
    parallel = _run(input_vcf, tmp_path, 'descent', workers=2, log_markers=True)

    np.testing.assert_array_equal(parallel.founder_alleles, sequential.founder_alleles)
    np.testing.assert_allclose(parallel.summary.distances, sequential.summary.distances)
