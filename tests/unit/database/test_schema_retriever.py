import unittest

from onepiece_api.database.connection import DatabaseConnection
from onepiece_api.database.models import Base, EXPECTED_TABLES
from onepiece_api.database.schema_retriever import SchemaRetriever


class TestSchemaRetriever(unittest.TestCase):
    """Test cases for reading the live schema."""

    def setUp(self):
        """Create the catalog schema in a fresh in-memory database."""
        self.connection = DatabaseConnection(connection_string="sqlite://")
        Base.metadata.create_all(self.connection.get_engine())
        self.retriever = SchemaRetriever(self.connection)

    def tearDown(self):
        """Clean up after each test."""
        self.connection.disconnect()

    def test_get_all_tables(self):
        """Test that every model table is reported, sorted."""
        self.assertEqual(self.retriever.get_all_tables(), sorted(EXPECTED_TABLES))

    def test_get_column_metadata(self):
        """Test the column description of one table."""
        columns = {col['name']: col for col in self.retriever.get_column_metadata("haki_types")}

        self.assertEqual(set(columns), {'id', 'name', 'description', 'color', 'created_at', 'updated_at'})
        self.assertFalse(columns['name']['nullable'])
        self.assertTrue(columns['color']['nullable'])

    def test_get_foreign_keys(self):
        """Test foreign keys in their wire shape."""
        foreign_keys = self.retriever.get_foreign_keys("organizations")

        self.assertIn(
            {'column': 'organization_type_id', 'referencedTable': 'organization_types', 'referencedColumn': 'id'},
            foreign_keys
        )
        self.assertEqual(len(foreign_keys), 3)

    def test_get_all_foreign_keys(self):
        """Test that only tables with foreign keys are listed."""
        relationships = self.retriever.get_all_foreign_keys()

        self.assertNotIn("races", relationships)
        self.assertEqual(len(relationships["character_haki"]), 2)
        self.assertEqual(
            set(relationships),
            {'characters', 'devil_fruits', 'organizations', 'character_organizations',
             'character_devil_fruits', 'character_haki', 'character_character_types'}
        )


if __name__ == '__main__':
    unittest.main()
