# Overview: Concurrent checkout tests on a file-backed database.

"""
Threads share one SQLite file, each worker inside its own app context, the
way concurrent requests would.
"""
import os
import tempfile
import threading
import unittest
from datetime import datetime

from stallpos import create_app
from stallpos.extensions import db
from stallpos.models import Item, Sale
from stallpos.services import sales_service


class ConcurrentCheckoutTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, "concurrency.db")
        self.app = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
            "STORAGE_RETRY_ATTEMPTS": 5,
        })

        with self.app.app_context():
            db.drop_all()
            db.create_all()

            tea = Item(name="Tea", price_cents=1000, cost_per_unit_cents=400, stock_type="unlimited", stock_qty=9999)
            samosa = Item(name="Samosa", price_cents=1500, cost_per_unit_cents=600, stock_type="fixed", stock_qty=5)
            db.session.add_all([tea, samosa])
            db.session.commit()
            self.tea_id = tea.id
            self.samosa_id = samosa.id

    def tearDown(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()
            db.session.remove()
            db.engine.dispose()
        self.tmpdir.cleanup()

    def _run_workers(self, count, cart, occurred_at):
        tokens = []
        errors = []
        lock = threading.Lock()

        def worker():
            with self.app.app_context():
                try:
                    sale = sales_service.record_sale(cart, "cash", occurred_at=occurred_at)
                    with lock:
                        tokens.append(sale.token_number)
                except Exception as exc:
                    with lock:
                        errors.append(exc)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker) for _ in range(count)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        return tokens, errors

    def test_concurrent_checkouts_get_gapless_unique_tokens(self):
        tokens, errors = self._run_workers(10, [(self.tea_id, 1)], datetime(2024, 5, 1, 12, 0))

        self.assertFalse(errors)
        self.assertEqual(sorted(tokens), list(range(1, 11)))

    def test_tokens_continue_after_concurrent_burst(self):
        day = datetime(2024, 5, 1, 12, 0)
        self._run_workers(5, [(self.tea_id, 1)], day)

        with self.app.app_context():
            sale = sales_service.record_sale([(self.tea_id, 1)], "cash", occurred_at=day)
            self.assertEqual(sale.token_number, 6)
            db.session.remove()

    def test_concurrent_fixed_stock_never_goes_negative(self):
        tokens, errors = self._run_workers(8, [(self.samosa_id, 1)], datetime(2024, 5, 1, 12, 0))

        self.assertFalse(errors)
        with self.app.app_context():
            self.assertEqual(db.session.get(Item, self.samosa_id).stock_qty, 0)
            self.assertEqual(db.session.query(Sale).count(), 8)
            db.session.remove()


if __name__ == "__main__":
    unittest.main()
