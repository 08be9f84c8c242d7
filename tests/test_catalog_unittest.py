import os
import unittest
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from catalog import filter_products, list_categories, stock_status
from models import Product


def _catalog():
    return [
        Product(1, "Cola Zero", "Drinks", 1.45, 100),
        Product(2, "Bottled Water", "Drinks", 0.80, 0),
        Product(3, "Chocolate Bar", "Desserts", 1.35, 5),
        Product(4, "Old Stock Chips", "Snacks", 1.00, 12, is_active=False),
        Product(5, "Beef Burger", "Meals", 5.80, 20),
    ]


class CatalogFilterTests(unittest.TestCase):
    def test_excludes_inactive_and_out_of_stock(self):
        ids = [p.id for p in filter_products(_catalog())]
        self.assertEqual(ids, [1, 3, 5])

    def test_search_matches_name_case_insensitive(self):
        ids = [p.id for p in filter_products(_catalog(), "COLA")]
        self.assertEqual(ids, [1])

    def test_search_matches_category(self):
        ids = [p.id for p in filter_products(_catalog(), "dess")]
        self.assertEqual(ids, [3])

    def test_category_is_exact(self):
        self.assertEqual([p.id for p in filter_products(_catalog(), category="Drinks")], [1])
        self.assertEqual(filter_products(_catalog(), category="drinks"), [])

    def test_all_category_means_no_filter(self):
        self.assertEqual(len(filter_products(_catalog(), category="All")), 3)

    def test_search_and_category_combined(self):
        self.assertEqual(filter_products(_catalog(), "burger", "Drinks"), [])

    def test_empty_result_is_valid(self):
        self.assertEqual(filter_products([], "anything"), [])

    def test_list_categories_only_sellable(self):
        self.assertEqual(list_categories(_catalog()), ["All", "Drinks", "Desserts", "Meals"])

    def test_stock_status(self):
        self.assertEqual(stock_status(0), "Out of Stock")
        self.assertEqual(stock_status(9), "Low Stock")
        self.assertEqual(stock_status(10), "In Stock")


if __name__ == '__main__':
    unittest.main()
