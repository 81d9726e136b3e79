"""端到端：一张卡片从创建到完成、归档、恢复、物理删除

使用真实时钟，只断言顺序与状态，不断言具体时间。
"""

from httpx import AsyncClient


class TestBoardLifecycle:
    async def test_full_lifecycle(self, client: AsyncClient):
        headers = {"X-Actor": "mechdog"}

        resp = await client.post(
            "/api/tasks",
            json={"title": "上线看板", "assignee": "sparky", "status": "hold"},
            headers=headers,
        )
        assert resp.status_code == 201
        task_id = resp.json()["task_id"]

        # hold -> done 需要 5 步，第 6 步为空操作
        statuses = []
        for _ in range(6):
            resp = await client.post(f"/api/tasks/{task_id}/advance", headers=headers)
            assert resp.status_code == 200
            statuses.append((resp.json()["task"]["status"], resp.json()["moved"]))
        assert statuses == [
            ("backlog", True),
            ("in_progress", True),
            ("sprint", True),
            ("daily", True),
            ("done", True),
            ("done", False),
        ]

        resp = await client.patch(
            f"/api/tasks/{task_id}",
            json={"description": "已上线", "priority": "high"},
            headers=headers,
        )
        assert resp.status_code == 200

        board = (await client.get("/api/board")).json()
        done_column = next(c for c in board["columns"] if c["status"] == "done")
        assert [t["task_id"] for t in done_column["tasks"]] == [task_id]

        assert (await client.delete(f"/api/tasks/{task_id}", headers=headers)).status_code == 204
        assert (await client.get("/api/stats")).json()["total"] == 0
        assert (await client.get("/api/tasks")).json()["tasks"] == []

        resp = await client.post(f"/api/tasks/{task_id}/restore", headers=headers)
        assert resp.status_code == 200
        assert (await client.get("/api/stats")).json()["byStatus"]["done"] == 1

        activities = (await client.get(f"/api/tasks/{task_id}/activities")).json()["activities"]
        types = [a["activity_type"] for a in activities]
        assert types[0] == "restored"
        assert types[1] == "archived"
        assert types[2] == "priority_changed"
        assert types.count("status_changed") == 5
        assert types[-1] == "created"
        assert all(a["actor"] == "mechdog" for a in activities)

        assert (await client.delete(f"/api/tasks/{task_id}/purge")).status_code == 204
        resp = await client.get(f"/api/tasks/{task_id}", params={"archive_mode": "all"})
        assert resp.status_code == 404
