"""CLI 入口模块 -- python -m taskboard.core <command>

支持的命令：
  seed   将任务文件一次性导入数据库（表非空时不做修改）
  board  打印当前任务看板（JSON）
"""

import asyncio
import sys

from .config import get_action_lease_s, get_db_path, get_state_file, get_tasks_file


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m taskboard.core <command>")
        print("命令:")
        print("  seed   将任务文件一次性导入数据库")
        print("  board  打印当前任务看板（JSON）")
        sys.exit(1)

    command = sys.argv[1]

    if command == "seed":
        asyncio.run(seed())
    elif command == "board":
        asyncio.run(board())
    else:
        print(f"未知命令: {command}")
        print("可用命令: seed, board")
        sys.exit(1)


async def _open_client():
    from .storage import create_storage_client

    return await create_storage_client(
        tasks_file=get_tasks_file(),
        state_file=get_state_file(),
        db_path=get_db_path(),
        lease_s=get_action_lease_s(),
    )


async def seed() -> None:
    """执行 seed 迁移"""
    db_path = get_db_path()
    if not db_path:
        print("未配置 TASKBOARD_DB_PATH，无需 seed")
        sys.exit(1)

    print(f"数据库路径: {db_path}")
    print(f"任务文件: {get_tasks_file()}")

    client = await _open_client()
    try:
        if client.database is None:
            print("数据库不可用，seed 中止")
            sys.exit(1)
        inserted = await client.seed()
        if inserted:
            print(f"seed 完成，导入 {inserted} 个任务")
        else:
            print("tasks 表非空（或任务文件缺失），未做修改")
    finally:
        await client.close()


async def board() -> None:
    """打印任务看板"""
    client = await _open_client()
    try:
        result = await client.load_board()
        print(result.model_dump_json(indent=2, by_alias=True))
    finally:
        await client.close()


if __name__ == "__main__":
    main()
