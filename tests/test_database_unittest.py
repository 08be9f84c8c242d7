import os
import shutil
import tempfile
import unittest
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from database import DatabaseManager


class DatabaseTests(unittest.TestCase):
    def test_check_schema_creates_tables(self):
        tmpdir = tempfile.mkdtemp()
        try:
            mgr = DatabaseManager(db_name=os.path.join(tmpdir, 'pos.db'))
            conn = mgr.connect()
            cur = conn.cursor()
            cur.execute("SELECT name FROM sqlite_master WHERE type='table'")
            names = {r[0] for r in cur.fetchall()}
            expected = {'products', 'customers', 'employees', 'documents', 'document_items',
                        'transactions', 'stock_movements', 'pos_shifts'}
            self.assertTrue(expected.issubset(names))
            conn.close()
            # running it again is harmless
            mgr.check_schema()
        finally:
            shutil.rmtree(tmpdir, ignore_errors=True)


if __name__ == '__main__':
    unittest.main()
