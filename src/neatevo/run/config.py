"""
NEAT Configuration Module

This module implements the Config class, holding every tunable parameter of a
training run. A Config is built once (from an INI file, keyword overrides, or
both), validated, and then frozen: any later attempt to assign an attribute
raises AttributeError.

Classes:
    Config: Immutable collection of named configuration parameters
"""

import configparser
import numbers
import os

# Allowed values for 'initial_cxn_policy'
INITIAL_CXN_POLICIES = ("none", "one-input", "partial", "full")

class Config:
    """
    Immutable collection of the parameters controlling a training run.

    The INI file is organized in sections:

        [POPULATION_INIT]
        num_inputs              = 2
        num_outputs             = 1
        population_size         = 150
        population_kill_percent = 0.2
        initial_cxn_policy      = full
        initial_cxn_fraction    = 0.5

        [SPECIATION]
        distance_excess_coeff   = 1.0
        distance_disjoint_coeff = 1.0
        distance_weight_coeff   = 0.4
        compatibility_threshold = 3.0

        [MUTATION]
        mutate_weight         = 0.8
        mutate_weight_reset   = 0.1
        mutate_add_node       = 0.03
        mutate_add_edge       = 0.05
        mutate_add_edge_tries = 20
        mutate_disable_edge   = 0.0

        [CROSSOVER]
        crossover_keep_disabled = 0.4
        crossover_tries         = 1

        [TERMINATION]
        max_number_generations = 100
        fitness_threshold      = None

    Keys missing from the file keep their default value (defaults are taken
    from the original NEAT paper). Keyword overrides are applied on top of
    the file values.
    """

    # name => (section, type, default)
    _FIELDS = {
        # [POPULATION_INIT]
        'num_inputs'             : ('POPULATION_INIT', int,   2),
        'num_outputs'            : ('POPULATION_INIT', int,   1),
        'population_size'        : ('POPULATION_INIT', int,   150),
        'population_kill_percent': ('POPULATION_INIT', float, 0.20),
        'initial_cxn_policy'     : ('POPULATION_INIT', str,   'full'),
        'initial_cxn_fraction'   : ('POPULATION_INIT', float, 0.5),

        # [SPECIATION]
        'distance_excess_coeff'  : ('SPECIATION', float, 1.0),
        'distance_disjoint_coeff': ('SPECIATION', float, 1.0),
        'distance_weight_coeff'  : ('SPECIATION', float, 0.4),
        'compatibility_threshold': ('SPECIATION', float, 3.0),

        # [MUTATION]
        'mutate_weight'          : ('MUTATION', float, 0.8),
        'mutate_weight_reset'    : ('MUTATION', float, 0.1),
        'mutate_add_node'        : ('MUTATION', float, 0.03),
        'mutate_add_edge'        : ('MUTATION', float, 0.05),
        'mutate_add_edge_tries'  : ('MUTATION', int,   20),
        'mutate_disable_edge'    : ('MUTATION', float, 0.0),

        # [CROSSOVER]
        'crossover_keep_disabled': ('CROSSOVER', float, 0.4),
        'crossover_tries'        : ('CROSSOVER', int,   1),

        # [TERMINATION]
        'max_number_generations' : ('TERMINATION', int,   100),
        'fitness_threshold'      : ('TERMINATION', float, None),
    }

    # Parameters which may be set to None
    _OPTIONAL = ('initial_cxn_fraction', 'fitness_threshold')

    # Parameters which are probabilities (or fractions) and must lie in [0, 1]
    _PROBABILITIES = ('population_kill_percent',
                      'mutate_weight',
                      'mutate_weight_reset',
                      'mutate_add_node',
                      'mutate_add_edge',
                      'mutate_disable_edge',
                      'crossover_keep_disabled')

    def __init__(self, config_file: str | None = None, **overrides):
        """
        Initialize Config by parsing an INI file and/or applying keyword overrides.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, every parameter starts at its default value.
            overrides:   Parameter values replacing the file (or default) values

        Raises:
            FileNotFoundError: If 'config_file' does not exist
            ValueError:        If a parameter is unknown or has an invalid value
        """
        for name, (_, _, default) in self._FIELDS.items():
            object.__setattr__(self, name, default)

        if config_file is not None:
            self._read_file(config_file)

        for name, value in overrides.items():
            if name not in self._FIELDS:
                raise ValueError(f"Unknown configuration parameter '{name}'")
            object.__setattr__(self, name, self._check_type(name, value))

        self._validate()
        object.__setattr__(self, '_frozen', True)

    def _read_file(self, config_file: str) -> None:
        """
        Read parameter values from an INI file. Keys absent from the file keep their default.
        """
        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        for name, (section, value_type, _) in self._FIELDS.items():
            if not parser.has_option(section, name):
                continue

            raw_value = parser.get(section, name)
            if raw_value.lower() == 'none':
                value = None
            elif value_type == int:
                value = parser.getint(section, name)
            elif value_type == float:
                value = parser.getfloat(section, name)
            else:
                value = raw_value.strip()
            object.__setattr__(self, name, self._check_type(name, value))

    def _check_type(self, name: str, value):
        """
        Check a parameter value against the type of its parameter.

        Integer parameters take integers (but not bools), float parameters take
        any real number and store it as a float. Only the optional parameters
        may be None.

        Returns:
            the value to store

        Raises:
            ValueError: If the value has the wrong type
        """
        _, value_type, _ = self._FIELDS[name]

        if value is None:
            if name in self._OPTIONAL:
                return None
        elif isinstance(value, bool):
            pass
        elif value_type == int and isinstance(value, numbers.Integral):
            return int(value)
        elif value_type == float and isinstance(value, numbers.Real):
            return float(value)
        elif value_type == str and isinstance(value, str):
            return value

        raise ValueError(f"'{name}' must be of type {value_type.__name__}, got {value!r}")

    def _validate(self) -> None:
        """
        Fail fast on parameter values that would break a training run.
        """
        if self.num_inputs < 0:
            raise ValueError(f"'num_inputs' must be non-negative, got {self.num_inputs}")
        if self.num_outputs < 1:
            raise ValueError(f"'num_outputs' must be at least 1, got {self.num_outputs}")
        if self.population_size < 1:
            raise ValueError(f"'population_size' must be at least 1, got {self.population_size}")

        for name in self._PROBABILITIES:
            value = getattr(self, name)
            if value is None or not 0.0 <= value <= 1.0:
                raise ValueError(f"'{name}' must be in [0, 1], got {value}")

        for name in ('distance_excess_coeff', 'distance_disjoint_coeff', 'distance_weight_coeff'):
            if getattr(self, name) < 0:
                raise ValueError(f"'{name}' must be non-negative, got {getattr(self, name)}")
        if self.compatibility_threshold <= 0:
            raise ValueError(f"'compatibility_threshold' must be positive, got {self.compatibility_threshold}")

        if self.mutate_add_edge_tries < 0:
            raise ValueError(f"'mutate_add_edge_tries' must be non-negative, got {self.mutate_add_edge_tries}")
        if self.crossover_tries < 1:
            raise ValueError(f"'crossover_tries' must be at least 1, got {self.crossover_tries}")
        if self.max_number_generations < 0:
            raise ValueError(f"'max_number_generations' must be non-negative, got {self.max_number_generations}")

        if self.initial_cxn_policy not in INITIAL_CXN_POLICIES:
            raise ValueError(f"bad initial connection policy '{self.initial_cxn_policy}', "
                             f"expected one of {INITIAL_CXN_POLICIES}")

        # The fraction of connections to instantiate only matters for the "partial" policy
        if self.initial_cxn_policy == "partial":
            if self.initial_cxn_fraction is None or not 0.0 <= self.initial_cxn_fraction <= 1.0:
                raise ValueError(f"'initial_cxn_fraction' must be in [0, 1], got {self.initial_cxn_fraction}")

    def __setattr__(self, name, value):
        raise AttributeError(f"Config is immutable, cannot set '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"Config is immutable, cannot delete '{name}'")

    def __repr__(self):
        params = ', '.join(f"{name}={getattr(self, name)!r}" for name in self._FIELDS)
        return f"Config({params})"
