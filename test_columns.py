import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.api.v1.columns import (
    reorder_columns,
    create_column,
    delete_column,
    move_column
)
from taskboard.core.exceptions import AccessDenied, InvalidInput, NotFound
from taskboard.models.user import User
from taskboard.models.board import Board
from taskboard.models.column import Column
from taskboard.schemas.column import ColumnCreate
from taskboard.schemas.moves import ColumnOrderUpdate, ColumnMove


@pytest.fixture
def mock_db():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def owner():
    user = MagicMock(spec=User)
    user.id = 1
    return user


@pytest.fixture
def mock_board():
    board = MagicMock(spec=Board)
    board.id = 1
    board.owner_id = 1
    return board


@pytest.fixture
def mock_column():
    column = MagicMock(spec=Column)
    column.id = 5
    column.board_id = 1
    column.title = "Todo"
    column.position = 0
    return column


class TestReorderColumns:
    """Тесты для эндпоинта reorder_columns"""

    @pytest.mark.asyncio
    async def test_reorder_success(self, mock_db, owner):
        """Успешное изменение порядка колонок"""
        column_order = ColumnOrderUpdate(column_ids=[3, 1, 2])

        with patch('taskboard.api.v1.columns.MoveService.reorder_columns', new_callable=AsyncMock) as mock_reorder:
            result = await reorder_columns(1, column_order, mock_db, owner)

            assert result == {"success": True}
            mock_reorder.assert_called_once_with(
                db=mock_db,
                user_id=1,
                board_id=1,
                column_ids=[3, 1, 2]
            )

    @pytest.mark.asyncio
    async def test_reorder_propagates_access_denied(self, mock_db, owner):
        """Чужая доска: ошибка доступа пробрасывается до обработчика приложения"""
        column_order = ColumnOrderUpdate(column_ids=[1, 2])

        with patch('taskboard.api.v1.columns.MoveService.reorder_columns',
                   new_callable=AsyncMock, side_effect=AccessDenied()):
            with pytest.raises(AccessDenied) as exc_info:
                await reorder_columns(2, column_order, mock_db, owner)

            assert exc_info.value.status_code == 403
            assert exc_info.value.detail == "Access denied"

    def test_duplicate_ids_rejected_by_schema(self):
        """Повторяющиеся id не проходят валидацию"""
        with pytest.raises(ValueError):
            ColumnOrderUpdate(column_ids=[1, 1, 2])


class TestCreateColumn:
    """Тесты для эндпоинта create_column"""

    @pytest.mark.asyncio
    async def test_create_success(self, mock_db, owner, mock_board, mock_column):
        """Колонка создается после проверки владельца"""
        column_create = ColumnCreate(title="Todo", color="#ff0000")

        with patch('taskboard.api.v1.columns.AccessService.get_owned_board',
                   new_callable=AsyncMock, return_value=mock_board) as mock_access, \
             patch('taskboard.api.v1.columns.ColumnService.create',
                   new_callable=AsyncMock, return_value=mock_column) as mock_create:

            result = await create_column(1, column_create, mock_db, owner)

            assert result == mock_column
            mock_access.assert_called_once_with(mock_db, 1, 1)
            mock_create.assert_called_once_with(
                db=mock_db,
                board_id=1,
                title="Todo",
                color="#ff0000",
                wip_limit=None
            )

    @pytest.mark.asyncio
    async def test_create_on_missing_board(self, mock_db, owner):
        """Несуществующая доска - колонка не создается"""
        column_create = ColumnCreate(title="Todo")

        with patch('taskboard.api.v1.columns.AccessService.get_owned_board',
                   new_callable=AsyncMock, side_effect=NotFound("Board not found")), \
             patch('taskboard.api.v1.columns.ColumnService.create', new_callable=AsyncMock) as mock_create:

            with pytest.raises(NotFound):
                await create_column(999, column_create, mock_db, owner)

            mock_create.assert_not_called()


class TestDeleteColumn:
    """Тесты для эндпоинта delete_column"""

    @pytest.mark.asyncio
    async def test_delete_success(self, mock_db, owner, mock_column):
        with patch('taskboard.api.v1.columns.AccessService.get_owned_column',
                   new_callable=AsyncMock, return_value=mock_column), \
             patch('taskboard.api.v1.columns.ColumnService.delete', new_callable=AsyncMock) as mock_delete:

            result = await delete_column(5, mock_db, owner)

            assert result is None
            mock_delete.assert_called_once_with(db=mock_db, column=mock_column)

    @pytest.mark.asyncio
    async def test_delete_foreign_column(self, mock_db, owner):
        with patch('taskboard.api.v1.columns.AccessService.get_owned_column',
                   new_callable=AsyncMock, side_effect=AccessDenied()), \
             patch('taskboard.api.v1.columns.ColumnService.delete', new_callable=AsyncMock) as mock_delete:

            with pytest.raises(AccessDenied):
                await delete_column(5, mock_db, owner)

            mock_delete.assert_not_called()


class TestMoveColumn:
    """Тесты для эндпоинта move_column"""

    @pytest.mark.asyncio
    async def test_move_success(self, mock_db, owner):
        with patch('taskboard.api.v1.columns.MoveService.move_column', new_callable=AsyncMock) as mock_move:
            result = await move_column(5, ColumnMove(destination_index=2), mock_db, owner)

            assert result == {"success": True}
            mock_move.assert_called_once_with(
                db=mock_db,
                user_id=1,
                column_id=5,
                destination_index=2
            )

    @pytest.mark.asyncio
    async def test_move_out_of_range(self, mock_db, owner):
        with patch('taskboard.api.v1.columns.MoveService.move_column',
                   new_callable=AsyncMock, side_effect=InvalidInput("Destination index out of range")):
            with pytest.raises(InvalidInput) as exc_info:
                await move_column(5, ColumnMove(destination_index=10), mock_db, owner)

            assert exc_info.value.code == "invalid-input"

    def test_negative_index_rejected_by_schema(self):
        with pytest.raises(ValueError):
            ColumnMove(destination_index=-1)
