import pytest

from stochsir.config import (
    COMPARTMENTS,
    Config,
    ConfigurationError,
    DefaultConfig,
    ReplicatesConfig,
    SimulationParameters,
    get_config,
    steps_between,
)


class TestSimulationParameters:
    def test_initial_compartments(self):
        params = SimulationParameters(N=1000, I0=10, beta=0.2, gamma=0.1)
        assert params.S0 == 990
        assert params.R0 == 0
        assert params.dt == 1.0

    def test_valid_parameters_pass(self):
        SimulationParameters(N=1000, I0=10, beta=0.2, gamma=0.1).validate()

    def test_boundary_values_are_valid(self):
        SimulationParameters(N=0, I0=0, beta=0.0, gamma=0.0).validate()
        SimulationParameters(N=10, I0=10, beta=0.2, gamma=0.1).validate()

    def test_initial_infected_above_population(self):
        with pytest.raises(ConfigurationError, match="cannot exceed"):
            SimulationParameters(N=1000, I0=1500, beta=0.2, gamma=0.1).validate()

    def test_non_integer_population(self):
        with pytest.raises(ConfigurationError, match="integer"):
            SimulationParameters(N=1000.5, I0=10, beta=0.2, gamma=0.1).validate()

    @pytest.mark.parametrize("name", ["beta", "gamma", "dt"])
    def test_non_numeric_rate(self, name):
        values = {"N": 1000, "I0": 10, "beta": 0.2, "gamma": 0.1, "dt": 1.0}
        values[name] = None
        with pytest.raises(ConfigurationError, match="real number"):
            SimulationParameters(**values).validate()

    def test_infinite_rate(self):
        with pytest.raises(ConfigurationError, match="finite"):
            SimulationParameters(N=1000, I0=10, beta=float("inf"), gamma=0.1).validate()

    def test_configuration_error_is_value_error(self):
        assert issubclass(ConfigurationError, ValueError)


class TestStepsBetween:
    def test_unit_grid(self):
        assert steps_between(range(0, 5), 1.0) == [1, 1, 1, 1]

    def test_fractional_dt(self):
        assert steps_between([0, 1, 3], 0.5) == [2, 4]

    def test_single_point(self):
        assert steps_between([0], 1.0) == []

    def test_empty_grid(self):
        with pytest.raises(ConfigurationError):
            steps_between([], 1.0)

    def test_not_increasing(self):
        with pytest.raises(ConfigurationError, match="strictly increasing"):
            steps_between([0, 2, 2], 1.0)

    def test_off_step_spacing(self):
        with pytest.raises(ConfigurationError, match="multiple of dt"):
            steps_between([0, 1.5], 1.0)


class TestConfig:
    def test_default_config(self):
        config = DefaultConfig()
        assert config.N == 1000
        assert config.I0 == 10
        assert config.beta == 0.2
        assert config.gamma == 0.1
        assert config.n_replicates == 1
        assert config.seed == 1
        assert config.time_grid == list(range(0, 101))

    def test_replicates_config(self):
        config = ReplicatesConfig()
        assert config.n_replicates == 200
        assert config.N == 1000

    def test_get_config(self):
        assert isinstance(get_config("default"), DefaultConfig)
        assert get_config("replicates").n_replicates == 200

    def test_get_config_unknown(self):
        with pytest.raises(ValueError, match="Unknown config"):
            get_config("nonexistent")

    def test_parameters_property(self):
        params = Config(N=500, I0=5, beta=0.3, gamma=0.2, dt=0.5).parameters
        assert params == SimulationParameters(N=500, I0=5, beta=0.3, gamma=0.2, dt=0.5)

    def test_validate_rejects_bad_replicates(self):
        with pytest.raises(ConfigurationError):
            Config(n_replicates=0).validate()

    @pytest.mark.parametrize("n_replicates", [2.5, "3", None])
    def test_validate_rejects_non_integer_replicates(self, n_replicates):
        with pytest.raises(ConfigurationError, match="integer"):
            Config(n_replicates=n_replicates).validate()

    @pytest.mark.parametrize("compartments", [("I", "S", "R"), ("S", "I"), ("S", "E", "I", "R")])
    def test_validate_rejects_other_compartments(self, compartments):
        with pytest.raises(ConfigurationError, match="compartments"):
            Config(compartments=compartments).validate()

    def test_compartments_default_to_simulator_order(self):
        assert DefaultConfig().compartments == COMPARTMENTS

    def test_validate_rejects_negative_days(self):
        with pytest.raises(ConfigurationError):
            Config(days=-1).validate()

    def test_validate_rejects_bad_parameters(self):
        with pytest.raises(ConfigurationError):
            Config(I0=2000).validate()

    def test_to_dict(self):
        data = DefaultConfig().to_dict()
        assert data["N"] == 1000
        assert data["compartments"] == ["S", "I", "R"]
        assert data["n_replicates"] == 1
