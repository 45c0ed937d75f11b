# ==============================================================================
# STORE SQLITE - Backend relacional con transacciones reales
# ==============================================================================
# Misma interfaz que JsonInventoryStore (ver interfaces.py), pero la
# atomicidad y el aislamiento los da la base de datos:
#
#   - sales.item_id → items.id ON DELETE CASCADE (PRAGMA foreign_keys = ON)
#   - CHECK (quantity >= 0) impide stock negativo a nivel de tabla
#   - transaction() abre BEGIN IMMEDIATE: el lock de escritura se toma ANTES
#     de leer la cantidad, así dos ventas concurrentes del mismo artículo se
#     serializan (la segunda espera hasta `timeout` segundos)
#   - WAL: los lectores ven solo datos confirmados y no bloquean al escritor
#
# Fuera de una transacción cada operación usa su propia conexión
# (autocommit), por lo que el store es seguro entre hilos.
# ==============================================================================

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union

from stock_ledger.models.entities import Item, Sale
from stock_ledger.repositories.errors import (
    ConstraintViolationError,
    RecordNotFoundError,
    StoreError,
)
from stock_ledger.utils.calculations import round_currency, to_decimal
from stock_ledger.utils.dates import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

ITEM_COLUMNS = 'id, name, quantity, cost_price, selling_price, minimum_stock, unit'
SALE_COLUMNS = 'id, item_id, quantity, total_value, sale_date'


@contextmanager
def _translate_errors() -> Iterator[None]:
    """Convierte errores de sqlite3 en errores del store."""
    try:
        yield
    except sqlite3.IntegrityError as e:
        raise ConstraintViolationError(str(e)) from e
    except OverflowError as e:
        # Entero fuera del rango de INTEGER (64 bits)
        raise ConstraintViolationError(str(e)) from e
    except sqlite3.Error as e:
        raise StoreError(str(e)) from e


class _SqliteRepository:
    """
    Base de los repositorios SQLite.

    Si se construye con `conn`, todas las operaciones usan esa conexión
    (la de una transacción abierta). Si no, cada operación abre y cierra
    su propia conexión en modo autocommit.
    """

    def __init__(
        self,
        connect: Callable[[], sqlite3.Connection],
        conn: Optional[sqlite3.Connection] = None
    ):
        self._connect = connect
        self._conn = conn

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        if self._conn is not None:
            with _translate_errors():
                yield self._conn.cursor()
            return
        with _translate_errors():
            conn = self._connect()
        try:
            with _translate_errors():
                yield conn.cursor()
        finally:
            conn.close()


# ==============================================================================
# ARTÍCULOS
# ==============================================================================

class SqliteItemRepository(_SqliteRepository):

    @staticmethod
    def _to_item(row: sqlite3.Row) -> Item:
        return Item(
            id=int(row['id']),
            name=row['name'],
            quantity=int(row['quantity']),
            cost_price=to_decimal(row['cost_price']),
            selling_price=to_decimal(row['selling_price']),
            minimum_stock=int(row['minimum_stock']),
            unit=row['unit'],
        )

    def get_all(self) -> List[Item]:
        with self._cursor() as cur:
            cur.execute(f'SELECT {ITEM_COLUMNS} FROM items ORDER BY name ASC, id ASC')
            return [self._to_item(r) for r in cur.fetchall()]

    def get_low_stock(self) -> List[Item]:
        with self._cursor() as cur:
            cur.execute(
                f'SELECT {ITEM_COLUMNS} FROM items '
                'WHERE quantity <= minimum_stock ORDER BY name ASC, id ASC'
            )
            return [self._to_item(r) for r in cur.fetchall()]

    def get_by_id(self, item_id: int) -> Optional[Item]:
        with self._cursor() as cur:
            cur.execute(f'SELECT {ITEM_COLUMNS} FROM items WHERE id = ?', (item_id,))
            row = cur.fetchone()
            return self._to_item(row) if row else None

    def insert(self, item: Item) -> int:
        """Inserta o reemplaza (upsert por ID). Retorna el ID."""
        values = (
            item.name,
            item.quantity,
            str(item.cost_price),
            str(item.selling_price),
            item.minimum_stock,
            item.unit,
        )
        with self._cursor() as cur:
            if item.id:
                cur.execute(
                    """
                    INSERT INTO items (id, name, quantity, cost_price, selling_price, minimum_stock, unit)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        name = excluded.name,
                        quantity = excluded.quantity,
                        cost_price = excluded.cost_price,
                        selling_price = excluded.selling_price,
                        minimum_stock = excluded.minimum_stock,
                        unit = excluded.unit
                    """,
                    (item.id,) + values,
                )
                return int(item.id)
            cur.execute(
                """
                INSERT INTO items (name, quantity, cost_price, selling_price, minimum_stock, unit)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                values,
            )
            return int(cur.lastrowid)

    def update(self, item: Item) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE items
                SET name = ?, quantity = ?, cost_price = ?, selling_price = ?,
                    minimum_stock = ?, unit = ?
                WHERE id = ?
                """,
                (
                    item.name,
                    item.quantity,
                    str(item.cost_price),
                    str(item.selling_price),
                    item.minimum_stock,
                    item.unit,
                    item.id,
                ),
            )
            return cur.rowcount > 0

    def delete(self, item_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute('DELETE FROM items WHERE id = ?', (item_id,))
            return cur.rowcount > 0

    def get_quantity(self, item_id: int) -> Optional[int]:
        with self._cursor() as cur:
            cur.execute('SELECT quantity FROM items WHERE id = ?', (item_id,))
            row = cur.fetchone()
            return int(row['quantity']) if row else None

    def decrement_quantity(self, item_id: int, amount: int) -> None:
        """
        Raises:
            RecordNotFoundError: Si el artículo no existe
            ConstraintViolationError: Si el stock quedaría negativo
        """
        with self._cursor() as cur:
            cur.execute(
                'UPDATE items SET quantity = quantity - ? WHERE id = ?',
                (amount, item_id),
            )
            if cur.rowcount == 0:
                raise RecordNotFoundError('item', item_id)


# ==============================================================================
# VENTAS
# ==============================================================================

class SqliteSaleRepository(_SqliteRepository):

    @staticmethod
    def _to_sale(row: sqlite3.Row) -> Sale:
        return Sale(
            id=int(row['id']),
            item_id=int(row['item_id']),
            quantity=int(row['quantity']),
            total_value=to_decimal(row['total_value']),
            sale_date=parse_timestamp(row['sale_date']),
        )

    def _select(self, where: str = '', params: tuple = ()) -> List[Sale]:
        with self._cursor() as cur:
            cur.execute(
                f'SELECT {SALE_COLUMNS} FROM sales {where} '
                'ORDER BY sale_date DESC, id DESC',
                params,
            )
            return [self._to_sale(r) for r in cur.fetchall()]

    def get_all(self) -> List[Sale]:
        return self._select()

    def get_by_id(self, sale_id: int) -> Optional[Sale]:
        with self._cursor() as cur:
            cur.execute(f'SELECT {SALE_COLUMNS} FROM sales WHERE id = ?', (sale_id,))
            row = cur.fetchone()
            return self._to_sale(row) if row else None

    def get_by_date_range(self, start: datetime, end: datetime) -> List[Sale]:
        return self._select(
            'WHERE sale_date BETWEEN ? AND ?',
            (format_timestamp(start), format_timestamp(end)),
        )

    def get_total_in_range(self, start: datetime, end: datetime) -> Optional[Decimal]:
        with self._cursor() as cur:
            cur.execute(
                'SELECT SUM(total_value) AS total FROM sales WHERE sale_date BETWEEN ? AND ?',
                (format_timestamp(start), format_timestamp(end)),
            )
            total = cur.fetchone()['total']
            return round_currency(to_decimal(total)) if total is not None else None

    def count_in_range(self, start: datetime, end: datetime) -> int:
        with self._cursor() as cur:
            cur.execute(
                'SELECT COUNT(*) AS n FROM sales WHERE sale_date BETWEEN ? AND ?',
                (format_timestamp(start), format_timestamp(end)),
            )
            return int(cur.fetchone()['n'])

    def get_by_item(self, item_id: int) -> List[Sale]:
        return self._select('WHERE item_id = ?', (item_id,))

    def get_total_quantity_by_item(self, item_id: int) -> Optional[int]:
        with self._cursor() as cur:
            cur.execute('SELECT SUM(quantity) AS qty FROM sales WHERE item_id = ?', (item_id,))
            qty = cur.fetchone()['qty']
            return int(qty) if qty is not None else None

    def insert(self, sale: Sale) -> int:
        values = (
            sale.item_id,
            sale.quantity,
            str(sale.total_value),
            format_timestamp(sale.sale_date),
        )
        with self._cursor() as cur:
            if sale.id:
                cur.execute(
                    """
                    INSERT INTO sales (id, item_id, quantity, total_value, sale_date)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        item_id = excluded.item_id,
                        quantity = excluded.quantity,
                        total_value = excluded.total_value,
                        sale_date = excluded.sale_date
                    """,
                    (sale.id,) + values,
                )
                return int(sale.id)
            cur.execute(
                'INSERT INTO sales (item_id, quantity, total_value, sale_date) VALUES (?, ?, ?, ?)',
                values,
            )
            return int(cur.lastrowid)

    def update(self, sale: Sale) -> bool:
        with self._cursor() as cur:
            cur.execute(
                """
                UPDATE sales SET item_id = ?, quantity = ?, total_value = ?, sale_date = ?
                WHERE id = ?
                """,
                (
                    sale.item_id,
                    sale.quantity,
                    str(sale.total_value),
                    format_timestamp(sale.sale_date),
                    sale.id,
                ),
            )
            return cur.rowcount > 0

    def delete(self, sale_id: int) -> bool:
        with self._cursor() as cur:
            cur.execute('DELETE FROM sales WHERE id = ?', (sale_id,))
            return cur.rowcount > 0

    def delete_by_item(self, item_id: int) -> int:
        with self._cursor() as cur:
            cur.execute('DELETE FROM sales WHERE item_id = ?', (item_id,))
            return cur.rowcount


# ==============================================================================
# STORE
# ==============================================================================

class SqliteTransaction:
    """Repositorios ligados a la conexión de una transacción abierta."""

    def __init__(self, store: 'SqliteInventoryStore', conn: sqlite3.Connection):
        self.items = SqliteItemRepository(store._conn, conn)
        self.sales = SqliteSaleRepository(store._conn, conn)


class SqliteInventoryStore:
    """
    Store de inventario sobre SQLite.

    Uso:
        store = SqliteInventoryStore('/ruta/inventory.db')
        with store.transaction() as tx:
            ...
    """

    def __init__(self, db_path: Union[Path, str], timeout: float = DEFAULT_TIMEOUT):
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.db_path = str(db_path)
        self.timeout = timeout
        self.init_db()
        self.items = SqliteItemRepository(self._conn)
        self.sales = SqliteSaleRepository(self._conn)

    def _conn(self) -> sqlite3.Connection:
        # isolation_level=None: las transacciones se abren explícitamente
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute('PRAGMA foreign_keys = ON;')
        return conn

    def init_db(self) -> None:
        """Crea el esquema si no existe y aplica migraciones pendientes."""
        with _translate_errors():
            conn = self._conn()
            try:
                conn.execute('PRAGMA journal_mode = WAL;')
                self.run_migrations(conn)
            finally:
                conn.close()

    def run_migrations(self, conn: sqlite3.Connection) -> None:
        cur = conn.cursor()
        cur.execute('BEGIN IMMEDIATE')
        try:
            cur.execute(
                'CREATE TABLE IF NOT EXISTS schema_migrations '
                '(version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL)'
            )
            cur.execute('SELECT COALESCE(MAX(version), 0) FROM schema_migrations')
            current_version = int(cur.fetchone()[0])

            migrations = [
                (1, self._migration_v1_base),
            ]
            for version, migration in migrations:
                if version <= current_version:
                    continue
                migration(cur)
                cur.execute(
                    "INSERT INTO schema_migrations (version, applied_at) VALUES (?, datetime('now'))",
                    (version,),
                )
                logger.info('Migración SQLite v%s aplicada en %s', version, self.db_path)
            cur.execute('COMMIT')
        except BaseException:
            cur.execute('ROLLBACK')
            raise

    @staticmethod
    def _migration_v1_base(cur: sqlite3.Cursor) -> None:
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS items (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                quantity INTEGER NOT NULL CHECK (quantity >= 0),
                cost_price NUMERIC NOT NULL,
                selling_price NUMERIC NOT NULL,
                minimum_stock INTEGER NOT NULL CHECK (minimum_stock >= 0),
                unit TEXT NOT NULL
            )
            """
        )
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS sales (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                item_id INTEGER NOT NULL REFERENCES items(id) ON DELETE CASCADE,
                quantity INTEGER NOT NULL CHECK (quantity > 0),
                total_value NUMERIC NOT NULL,
                sale_date TEXT NOT NULL
            )
            """
        )
        cur.execute('CREATE INDEX IF NOT EXISTS idx_sales_item_id ON sales(item_id)')
        cur.execute('CREATE INDEX IF NOT EXISTS idx_sales_sale_date ON sales(sale_date)')

    @contextmanager
    def transaction(self) -> Iterator[SqliteTransaction]:
        """
        Unidad atómica: COMMIT si el bloque termina, ROLLBACK si lanza.

        Raises:
            StoreError: Si no se puede abrir o confirmar la transacción
        """
        with _translate_errors():
            conn = self._conn()
        try:
            with _translate_errors():
                conn.execute('BEGIN IMMEDIATE')
            try:
                yield SqliteTransaction(self, conn)
            except BaseException:
                conn.rollback()
                raise
            with _translate_errors():
                conn.commit()
        finally:
            conn.close()
