# tests/test_parameters/test_store.py

"""
Validation suite for the ParameterStore: lookup scoping, the linking pass with
its cycle check, and the evaluation order over a whole space.
"""

import pytest

from dspace_core.mapping import CodeMapping
from dspace_core.parameters import (
    CircularParameterDependencyError,
    MatchMode,
    Numeric,
    ParameterDefinitionError,
    ParameterLookupError,
    ParameterStore,
)


@pytest.fixture
def algorithm_space(make_param, integer_param):
    """
    Algorithm
      Population (integer)
      Mutation
        Rate (double, max depends on Population via substring)
        Strength (integer)
    Offspring (integer, max bounded by Population)
    """
    rate = make_param("Rate", numeric=Numeric.DOUBLE, incl_min="0", incl_max="1 / Population")
    strength = integer_param("Strength")
    mutation = make_param("Mutation", children=[rate, strength])
    population = integer_param("Population", incl_min="10")
    algorithm = make_param("Algorithm", children=[population, mutation])
    offspring = integer_param("Offspring", incl_min="1", incl_max="Population")
    return ParameterStore([algorithm, offspring])


class TestParameterStore:
    """Lifecycle of a store: registration, lookup, linking and ordering."""

    # =========================================================================
    # === Test Group 1: Registration & Lookup
    # =========================================================================

    def test_nodes_are_registered_by_dotted_id(self, algorithm_space):
        assert len(algorithm_space) == 6
        assert algorithm_space.contains_param("Algorithm.Mutation.Rate")
        assert "Offspring" in algorithm_space
        assert not algorithm_space.contains_param("Rate")
        assert algorithm_space.get_param("Nope") is None

    def test_require_param_raises_lookup_error(self, algorithm_space):
        with pytest.raises(ParameterLookupError, match="Nope"):
            algorithm_space.require_param("Nope")

    def test_duplicate_ids_are_rejected(self, integer_param):
        store = ParameterStore([integer_param("A")])
        with pytest.raises(ParameterDefinitionError, match="Duplicate"):
            store.add(integer_param("A"))

    def test_duplicate_siblings_within_one_tree_are_rejected(self, make_param, integer_param):
        root = make_param("root", children=[integer_param("x"), integer_param("x")])
        store = ParameterStore()
        with pytest.raises(ParameterDefinitionError, match="root.x"):
            store.add(root)
        assert len(store) == 0

    def test_only_roots_can_be_added(self, make_param, integer_param):
        child = integer_param("child")
        parent = make_param("parent", children=[child])
        with pytest.raises(ParameterDefinitionError):
            ParameterStore().add(child)
        assert child.parent is parent

    def test_local_lookup_searches_own_scope_first(self, algorithm_space):
        mutation = algorithm_space.get_param("Algorithm.Mutation")
        rate = algorithm_space.get_param_for_local_id("Rate", mutation)
        assert rate is algorithm_space.get_param("Algorithm.Mutation.Rate")

    def test_local_lookup_walks_up_to_ancestors(self, algorithm_space):
        rate = algorithm_space.get_param("Algorithm.Mutation.Rate")
        # Sibling of the context node.
        assert algorithm_space.get_param_for_local_id("Strength", rate).fqn == "Algorithm.Mutation.Strength"
        # Child of a grand-parent.
        assert algorithm_space.get_param_for_local_id("Population", rate).fqn == "Algorithm.Population"
        # Top level.
        assert algorithm_space.get_param_for_local_id("Offspring", rate).fqn == "Offspring"
        assert algorithm_space.get_param_for_local_id("Missing", rate) is None

    # =========================================================================
    # === Test Group 2: Linking & Cycle Detection
    # =========================================================================

    def test_link_populates_dependencies(self, algorithm_space):
        graph = algorithm_space.link()
        population = algorithm_space.get_param("Algorithm.Population")
        offspring = algorithm_space.get_param("Offspring")
        rate = algorithm_space.get_param("Algorithm.Mutation.Rate")

        assert offspring.max_dependencies == {population}
        assert rate.max_dependencies == {population}
        assert population.dependees == {offspring, rate}
        assert graph.has_edge("Algorithm.Population", "Offspring")

    def test_relinking_does_not_duplicate_state(self, algorithm_space):
        algorithm_space.link()
        algorithm_space.link()
        population = algorithm_space.get_param("Algorithm.Population")
        assert len(population.dependees) == 2

    def test_cycle_fails_fast(self, integer_param):
        """Three parameters bounding each other in a loop are rejected at link time."""
        a = integer_param("pa", incl_max="pc")
        b = integer_param("pb", incl_max="pa")
        c = integer_param("pc", incl_max="pb")
        store = ParameterStore([a, b, c])

        with pytest.raises(CircularParameterDependencyError) as excinfo:
            store.link()
        assert set(excinfo.value.cycle) == {"pa", "pb", "pc"}
        assert "Circular Parameter Dependency" in excinfo.value.get_diagnostic_report()

    def test_evaluation_order_respects_dependencies(self, algorithm_space):
        order = [node.fqn for node in algorithm_space.evaluation_order()]
        assert set(order) == {p.fqn for p in algorithm_space.params}
        assert order.index("Algorithm.Population") < order.index("Offspring")
        assert order.index("Algorithm.Population") < order.index("Algorithm.Mutation.Rate")

    def test_token_mode_store(self, integer_param):
        size = integer_param("size")
        other = integer_param("other", incl_max="maxsize")
        store = ParameterStore([size, other], match_mode=MatchMode.TOKEN)
        store.link()
        assert other.max_dependencies == set()

    # =========================================================================
    # === Test Group 3: Mapping Attachment
    # =========================================================================

    def test_mapping_for_unknown_parameter_is_rejected(self, algorithm_space):
        with pytest.raises(ParameterLookupError):
            algorithm_space.attach_mappings([CodeMapping("Unknown", "builtins.dict")])

    def test_class_of_numeric_parameter(self, algorithm_space):
        assert algorithm_space.class_of(algorithm_space.get_param("Offspring")) is int
        assert algorithm_space.class_of(algorithm_space.get_param("Algorithm.Mutation.Rate")) is float
        assert algorithm_space.class_of(algorithm_space.get_param("Algorithm")) is None

    def test_new_instance_requires_mapping(self, algorithm_space):
        with pytest.raises(ParameterLookupError, match="no code mapping"):
            algorithm_space.new_instance("Offspring", [])
