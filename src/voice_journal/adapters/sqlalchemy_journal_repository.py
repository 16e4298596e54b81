"""SQLAlchemy repository for journal entries (SQLite by default)."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from sqlalchemy import (
    DateTime,
    Engine,
    ForeignKey,
    String,
    Text,
    create_engine,
    delete,
    event,
    func,
    select,
)
from sqlalchemy.engine import make_url
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    relationship,
    selectinload,
)

from voice_journal.domain.errors import StoreUnavailableError
from voice_journal.domain.journal import (
    ExerciseItem,
    FoodItem,
    JournalEntry,
    JournalStats,
)
from voice_journal.services.journal import JournalRepository


class Base(DeclarativeBase):
    pass


class EntryRow(Base):
    __tablename__ = "entries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    timestamp: Mapped[str] = mapped_column(String, nullable=False)
    raw_text: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )

    foods: Mapped[list["FoodRow"]] = relationship(
        back_populates="entry", cascade="all, delete-orphan", order_by="FoodRow.id"
    )
    exercises: Mapped[list["ExerciseRow"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="ExerciseRow.id",
    )


class FoodRow(Base):
    __tablename__ = "foods"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        ForeignKey("entries.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[str | None] = mapped_column(String)
    calories: Mapped[int | None]
    protein: Mapped[str | None] = mapped_column(String)
    carbs: Mapped[str | None] = mapped_column(String)
    fat: Mapped[str | None] = mapped_column(String)
    fiber: Mapped[str | None] = mapped_column(String)

    entry: Mapped[EntryRow] = relationship(back_populates="foods")


class ExerciseRow(Base):
    __tablename__ = "exercises"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    entry_id: Mapped[int] = mapped_column(
        ForeignKey("entries.id", ondelete="CASCADE"), index=True
    )
    type: Mapped[str] = mapped_column(String, nullable=False)
    duration: Mapped[str | None] = mapped_column(String)
    intensity: Mapped[str | None] = mapped_column(String)
    calories_burned: Mapped[int | None]

    entry: Mapped[EntryRow] = relationship(back_populates="exercises")


@dataclass
class SqlAlchemyJournalRepository(JournalRepository):
    """SQLAlchemy implementation of the journal store."""

    database_url: str
    engine: Engine | None = None

    def initialize(self) -> None:
        """Create the engine and tables if they do not exist."""
        if self.engine is None:
            _ensure_sqlite_directory(self.database_url)
            engine = create_engine(self.database_url)
            if engine.dialect.name == "sqlite":
                event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            self.engine = engine
        Base.metadata.create_all(self.engine)

    def is_available(self) -> bool:
        """Return whether an engine has been created."""
        return self.engine is not None

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None

    def save_record(
        self,
        timestamp: str,
        raw_text: str,
        foods: list[FoodItem],
        exercises: list[ExerciseItem],
    ) -> int:
        """Insert an entry with its items in one transaction."""
        with self._session() as session, session.begin():
            row = EntryRow(
                timestamp=timestamp,
                raw_text=raw_text,
                foods=[
                    FoodRow(
                        name=food.name,
                        quantity=food.quantity,
                        calories=food.calories,
                        protein=food.nutrition.protein,
                        carbs=food.nutrition.carbs,
                        fat=food.nutrition.fat,
                        fiber=food.nutrition.fiber,
                    )
                    for food in foods
                ],
                exercises=[
                    ExerciseRow(
                        type=exercise.type,
                        duration=exercise.duration,
                        intensity=exercise.intensity,
                        calories_burned=exercise.calories_burned,
                    )
                    for exercise in exercises
                ],
            )
            session.add(row)
            session.flush()
            return row.id

    def list_entries(self) -> list[JournalEntry]:
        """Return all entries with items, newest first."""
        with self._session() as session:
            rows = session.scalars(
                select(EntryRow)
                .options(selectinload(EntryRow.foods), selectinload(EntryRow.exercises))
                .order_by(EntryRow.created_at.desc(), EntryRow.id.desc())
            ).all()
            return [_to_entry(row) for row in rows]

    def get_entry(self, entry_id: int) -> JournalEntry | None:
        """Return an entry with items by id."""
        with self._session() as session:
            row = session.scalars(
                select(EntryRow)
                .options(selectinload(EntryRow.foods), selectinload(EntryRow.exercises))
                .where(EntryRow.id == entry_id)
            ).first()
            return _to_entry(row) if row else None

    def delete_entry(self, entry_id: int) -> bool:
        """Delete an entry and its items."""
        with self._session() as session, session.begin():
            row = session.get(EntryRow, entry_id)
            if row is None:
                return False
            session.delete(row)
            return True

    def clear(self) -> None:
        """Delete every row from every table."""
        with self._session() as session, session.begin():
            session.execute(delete(ExerciseRow))
            session.execute(delete(FoodRow))
            session.execute(delete(EntryRow))

    def stats(self) -> JournalStats:
        """Return totals across all entries."""
        with self._session() as session:
            return JournalStats(
                total_entries=session.scalar(select(func.count(EntryRow.id))) or 0,
                total_foods=session.scalar(select(func.count(FoodRow.id))) or 0,
                total_exercises=session.scalar(select(func.count(ExerciseRow.id)))
                or 0,
                total_calories_consumed=session.scalar(
                    select(func.coalesce(func.sum(FoodRow.calories), 0))
                )
                or 0,
                total_calories_burned=session.scalar(
                    select(func.coalesce(func.sum(ExerciseRow.calories_burned), 0))
                )
                or 0,
            )

    def _session(self) -> Session:
        if self.engine is None:
            raise StoreUnavailableError("Journal database is not initialized")
        return Session(self.engine, expire_on_commit=False)


def _to_entry(row: EntryRow) -> JournalEntry:
    """Convert ORM rows into a journal entry."""
    return JournalEntry(
        id=row.id,
        timestamp=row.timestamp,
        raw_text=row.raw_text,
        created_at=row.created_at.isoformat() if row.created_at else None,
        foods=[
            FoodItem(
                name=food.name,
                quantity=food.quantity,
                calories=food.calories,
                nutrition={
                    "protein": food.protein,
                    "carbs": food.carbs,
                    "fat": food.fat,
                    "fiber": food.fiber,
                },
            )
            for food in row.foods
        ],
        exercises=[
            ExerciseItem(
                type=exercise.type,
                duration=exercise.duration,
                intensity=exercise.intensity,
                calories_burned=exercise.calories_burned,
            )
            for exercise in row.exercises
        ],
    )


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-based SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return
    if url.database in (None, "", ":memory:"):
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
