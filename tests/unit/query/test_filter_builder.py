import unittest

from onepiece_api.core.exceptions import InvalidFieldError
from onepiece_api.database.models import Character
from onepiece_api.query.filter_builder import (
    FilterBuilder,
    FilterKind,
    FilterSpec,
    Operator,
    QueryOptions,
    RangeSpec,
    DEFAULT_LIMIT,
    MAX_LIMIT
)


class TestQueryOptions(unittest.TestCase):
    """Test cases for coercing raw query parameters."""

    def test_defaults(self):
        """Test that missing parameters fall back to page 1 and limit 10."""
        options = QueryOptions.from_params({})

        self.assertEqual(options.page, 1)
        self.assertEqual(options.limit, DEFAULT_LIMIT)
        self.assertEqual(options.offset, 0)
        self.assertIsNone(options.search)
        self.assertEqual(options.filters, {})

    def test_page_and_limit_are_clamped(self):
        """Test that out-of-range or malformed values are clamped rather than rejected."""
        self.assertEqual(QueryOptions.from_params({'page': '0'}).page, 1)
        self.assertEqual(QueryOptions.from_params({'page': '-3'}).page, 1)
        self.assertEqual(QueryOptions.from_params({'page': 'abc'}).page, 1)
        self.assertEqual(QueryOptions.from_params({'limit': '0'}).limit, 1)
        self.assertEqual(QueryOptions.from_params({'limit': '500'}).limit, MAX_LIMIT)
        self.assertEqual(QueryOptions.from_params({'limit': 'many'}).limit, DEFAULT_LIMIT)

    def test_offset(self):
        """Test offset computation from page and limit."""
        options = QueryOptions.from_params({'page': '3', 'limit': '20'})

        self.assertEqual(options.offset, 40)

    def test_search_is_trimmed(self):
        """Test that blank search terms are dropped and others trimmed."""
        self.assertIsNone(QueryOptions.from_params({'search': '   '}).search)
        self.assertEqual(QueryOptions.from_params({'search': '  Luffy '}).search, 'Luffy')

    def test_reserved_params_are_not_filters(self):
        """Test that pagination and sort parameters are separated from filters."""
        options = QueryOptions.from_params({
            'page': '2', 'limit': '5', 'sortBy': 'bounty', 'sortOrder': 'desc', 'status': 'alive'
        })

        self.assertEqual(options.filters, {'status': 'alive'})
        self.assertEqual(options.sort_by, 'bounty')
        self.assertEqual(options.sort_order, 'desc')

    def test_snake_case_sort_params(self):
        """Test that sort_by and sort_order are accepted as aliases."""
        options = QueryOptions.from_params({'sort_by': 'age', 'sort_order': 'DESC'})

        self.assertEqual(options.sort_by, 'age')
        self.assertEqual(options.sort_order, 'DESC')


class TestFilterBuilder(unittest.TestCase):
    """Test cases for the FilterBuilder class."""

    def setUp(self):
        """Set up a builder shaped like the characters resource."""
        self.builder = FilterBuilder(
            search_columns=('name', 'alias'),
            sortable=('name', 'bounty', 'age'),
            default_sort='name',
            filters=(
                FilterSpec('race_id', 'race_id', FilterKind.ID),
                FilterSpec('status', 'status', FilterKind.CHOICE, choices=('alive', 'deceased', 'unknown')),
                FilterSpec('is_alive', 'status', FilterKind.FLAG, flag_value='alive'),
            ),
            ranges=(RangeSpec('bounty', 'bounty'),)
        )

    def build(self, params):
        return self.builder.build(QueryOptions.from_params(params))

    def test_no_filters(self):
        """Test that an empty request produces no conditions and no where clause."""
        descriptor = self.build({})

        self.assertEqual(descriptor.conditions, [])
        self.assertIsNone(descriptor.where_clause(Character))
        self.assertEqual(descriptor.sort_by, 'name')
        self.assertEqual(descriptor.sort_order, 'ASC')

    def test_id_filter(self):
        """Test that ID filters must be positive integers."""
        descriptor = self.build({'race_id': '2'})
        condition = descriptor.conditions[0]

        self.assertEqual((condition.column, condition.operator, condition.value), ('race_id', Operator.EQ, 2))

        for bad in ('0', '-1', 'abc', '1.5'):
            with self.assertRaises(InvalidFieldError) as context:
                self.build({'race_id': bad})
            self.assertEqual(context.exception.error_code, 'INVALID_RACE_ID')
            self.assertEqual(context.exception.status_code, 400)

    def test_blank_filter_is_ignored(self):
        """Test that a filter sent with an empty value does not restrict the query."""
        self.assertEqual(self.build({'race_id': '  '}).conditions, [])

    def test_choice_filter(self):
        """Test that enum filters are case-insensitive and validated."""
        descriptor = self.build({'status': 'Deceased'})
        self.assertEqual(descriptor.conditions[0].value, 'deceased')

        with self.assertRaises(InvalidFieldError) as context:
            self.build({'status': 'missing'})
        self.assertEqual(context.exception.error_code, 'INVALID_STATUS')
        self.assertIn('alive, deceased, unknown', context.exception.message)

    def test_flag_filter(self):
        """Test that boolean filters compare against the flag value."""
        alive = self.build({'is_alive': 'yes'}).conditions[0]
        not_alive = self.build({'is_alive': '0'}).conditions[0]

        self.assertEqual((alive.operator, alive.value), (Operator.EQ, 'alive'))
        self.assertEqual((not_alive.operator, not_alive.value), (Operator.NE, 'alive'))

        with self.assertRaises(InvalidFieldError) as context:
            self.build({'is_alive': 'maybe'})
        self.assertEqual(context.exception.error_code, 'INVALID_IS_ALIVE')

    def test_range_filter(self):
        """Test that min/max parameters become inclusive bounds."""
        descriptor = self.build({'min_bounty': '100', 'max_bounty': '1000'})
        bounds = {(c.operator, c.value) for c in descriptor.conditions}

        self.assertEqual(bounds, {(Operator.GE, 100), (Operator.LE, 1000)})

    def test_range_bounds_must_be_non_negative_integers(self):
        """Test that malformed range bounds raise INVALID_<PARAM>."""
        with self.assertRaises(InvalidFieldError) as context:
            self.build({'min_bounty': '-5'})
        self.assertEqual(context.exception.error_code, 'INVALID_MIN_BOUNTY')

        with self.assertRaises(InvalidFieldError) as context:
            self.build({'max_bounty': 'lots'})
        self.assertEqual(context.exception.error_code, 'INVALID_MAX_BOUNTY')

    def test_inverted_range(self):
        """Test that min greater than max is rejected with a range error."""
        with self.assertRaises(InvalidFieldError) as context:
            self.build({'min_bounty': '1000', 'max_bounty': '10'})

        self.assertEqual(context.exception.error_code, 'INVALID_BOUNTY_RANGE')

    def test_equal_range_bounds_are_valid(self):
        """Test that min equal to max is accepted."""
        self.assertEqual(len(self.build({'min_bounty': '5', 'max_bounty': '5'}).conditions), 2)

    def test_sort_whitelist(self):
        """Test that unknown sort columns and directions fall back silently."""
        self.assertEqual(self.builder.resolve_sort('bounty', 'desc'), ('bounty', 'DESC'))
        self.assertEqual(self.builder.resolve_sort('password', 'desc'), ('name', 'DESC'))
        self.assertEqual(self.builder.resolve_sort('age', 'sideways'), ('age', 'ASC'))
        self.assertEqual(self.builder.resolve_sort(None, None), ('name', 'ASC'))

    def test_order_by_adds_id_tiebreaker(self):
        """Test that non-id sorts get a secondary id ordering."""
        descriptor = self.build({'sortBy': 'bounty', 'sortOrder': 'desc'})
        order = [str(clause) for clause in descriptor.order_by(Character)]

        self.assertEqual(len(order), 2)
        self.assertIn('bounty DESC', order[0])
        self.assertIn('id ASC', order[1])

    def test_search_escapes_wildcards(self):
        """Test that LIKE wildcards in the search term are escaped."""
        descriptor = self.build({'search': '50%_off'})
        clause = descriptor.where_clause(Character)
        compiled = clause.compile(compile_kwargs={"literal_binds": True})

        self.assertIn("ESCAPE '/'", str(compiled))
        self.assertIn('50/%/_off', str(compiled))

    def test_first_invalid_filter_wins(self):
        """Test that validation stops at the first invalid filter in declaration order."""
        with self.assertRaises(InvalidFieldError) as context:
            self.build({'race_id': 'x', 'status': 'bad'})

        self.assertEqual(context.exception.error_code, 'INVALID_RACE_ID')


if __name__ == '__main__':
    unittest.main()
