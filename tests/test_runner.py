import numpy as np
import pytest

from surface_network import Namelist, write_surface_network
from surface_flow import SurfaceFlowPhysics, SurfaceFlowRunner, run_surface_flow_model
from surface_flow.main import main
from surface_flow.utils import check_boundary_state, check_state_valid


def _model_run(cnetwork, **overrides):
    params = {
        'cnetwork': cnetwork,
        'syear': 2000, 'smon': 1, 'sday': 1, 'shour': 0,
        'eyear': 2000, 'emon': 1, 'eday': 1, 'ehour': 6,
        'dt': 1800.0,
        'wdsrf_init': 20.0,
        'qsurf_in': 2.0,
        'ifrq_out': 3,
    }
    params.update(overrides)
    return Namelist(data={'MODEL_RUN': params})


@pytest.fixture
def network_file(tmp_path, tree_network):
    path = str(tmp_path / 'network.nc')
    write_surface_network(path, tree_network)
    return path


def test_runner_conserves_water(network_file):
    runner = SurfaceFlowRunner(_model_run(network_file))
    runner.initialize()
    runner.run()
    runner.finalize()

    assert runner.time_control.kstep == 12
    # 2 mm/h over 6 h on every patch
    total_area = sum(np.sum(b.area) for b in runner.network.basins)
    assert runner.volume_added == pytest.approx(0.012 * total_area)
    assert abs(runner.mass_error) < 1e-9
    assert np.all(runner.state.wdsrf >= 0.0)


def test_run_surface_flow_model(network_file, capsys):
    assert run_surface_flow_model(_model_run(network_file, lvalidate=False))
    out = capsys.readouterr().out
    assert "Skipping network validation" in out
    assert "Relative mass balance error" in out


def test_network_argument_overrides_namelist(network_file, tmp_path):
    nml = _model_run(str(tmp_path / 'missing.nc'))
    assert run_surface_flow_model(nml, cnetwork=network_file)


def test_missing_network_fails(tmp_path):
    assert not run_surface_flow_model(_model_run(str(tmp_path / 'missing.nc')))


def test_main_validate_only(network_file, tmp_path):
    nml_file = tmp_path / 'surface_flow.nml'
    nml_file.write_text(f"&MODEL_RUN\n  cnetwork = '{network_file}'\n/\n")

    assert main([str(nml_file), '--validate-only']) == 0
    assert main([str(nml_file), '--validate-only', '--network', str(tmp_path / 'missing.nc')]) == 1


def test_main_missing_namelist(tmp_path):
    assert main([str(tmp_path / 'missing.nml')]) == 1


def test_state_checks(nml, chain2, set_depth):
    physics = SurfaceFlowPhysics(nml, chain2)
    set_depth(chain2, physics.state, [10.0, 40.0])
    physics.surface_flow(1800.0)

    assert check_state_valid(physics.get_state())
    assert check_boundary_state(chain2, physics.state, physics.pondmin)

    physics.state.veloc_hru[0] = 0.2
    with pytest.raises(ValueError, match="outlet velocity"):
        check_boundary_state(chain2, physics.state, physics.pondmin)
    assert not check_boundary_state(chain2, physics.state, physics.pondmin,
                                    raise_error=False, verbose=False)

    physics.state.wdsrf[1] = -1.0
    with pytest.raises(ValueError, match="Negative"):
        check_state_valid(physics.get_state())
