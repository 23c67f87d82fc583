import pytest
from httpx import AsyncClient

from anistream.schemas.enums import AnimeStatus, AnimeType
from tests.fixtures.app import API


# ─────────────────────────────────────────────────────────────
# GET /animes
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_list_ongoing_latest_first_page(async_client: AsyncClient, create_anime):
    for year in (2019, 1999, 2022, 2015, 2020):
        await create_anime(f"Show {year}", release_year=year)
    await create_anime("Finished", release_year=2023, status=AnimeStatus.COMPLETED)

    resp = await async_client.get(f"{API}/animes", params={"status": "Ongoing", "order": "Latest", "page": "1", "limit": "2"})
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert [a["releaseYear"] for a in body["data"]] == [2022, 2020]
    assert body["pagination"] == {
        "total": 5,
        "page": 1,
        "limit": 2,
        "totalPages": 3,
        "hasNextPage": True,
        "hasPrevPage": False,
    }


@pytest.mark.anyio
async def test_list_default_order_is_by_title(async_client: AsyncClient, create_anime):
    for title in ("Trigun", "Akira", "Monster"):
        await create_anime(title)
    body = (await async_client.get(f"{API}/animes")).json()
    assert [a["title"] for a in body["data"]] == ["Akira", "Monster", "Trigun"]
    assert body["pagination"]["limit"] == 25


@pytest.mark.anyio
async def test_search_relevance_over_http(async_client: AsyncClient, create_anime):
    for title in ("Boruto: Naruto Next Generations", "Naruto Shippuden", "Naruto", "Bleach"):
        await create_anime(title)
    body = (await async_client.get(f"{API}/animes", params={"search": "NARUTO"})).json()
    assert [a["title"] for a in body["data"]] == ["Naruto", "Naruto Shippuden", "Boruto: Naruto Next Generations"]


@pytest.mark.anyio
async def test_filter_by_genre_year_and_type(async_client: AsyncClient, create_anime, create_genre):
    action = await create_genre("Action")
    drama = await create_genre("Drama")
    await create_anime("Match", release_year=2020, type=AnimeType.MOVIE, genre_ids=[action.id, drama.id])
    await create_anime("Wrong genre", release_year=2020, type=AnimeType.MOVIE, genre_ids=[drama.id])
    await create_anime("Wrong year", release_year=2021, type=AnimeType.MOVIE, genre_ids=[action.id])
    await create_anime("Wrong type", release_year=2020, type=AnimeType.TV, genre_ids=[action.id])

    resp = await async_client.get(
        f"{API}/animes", params={"genreId": str(action.id), "year": "2020", "type": "Movie", "status": "All"}
    )
    data = resp.json()["data"]
    assert [a["title"] for a in data] == ["Match"]
    assert [g["name"] for g in data[0]["genres"]] == ["Action", "Drama"]


@pytest.mark.anyio
async def test_unknown_enum_filter_returns_empty_page(async_client: AsyncClient, create_anime):
    await create_anime("Anything")
    body = (await async_client.get(f"{API}/animes", params={"type": "Webtoon"})).json()
    assert body["data"] == []
    assert body["pagination"]["total"] == 0
    assert body["pagination"]["totalPages"] == 0


@pytest.mark.anyio
async def test_lenient_query_parsing(async_client: AsyncClient, create_anime):
    for i in range(3):
        await create_anime(f"Title {i}")
    resp = await async_client.get(f"{API}/animes", params={"genreId": "abc", "page": "x", "limit": "2junk"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["pagination"]["page"] == 1
    assert body["pagination"]["limit"] == 2
    assert len(body["data"]) == 2


@pytest.mark.anyio
async def test_rating_order(async_client: AsyncClient, create_anime):
    await create_anime("Low", rating=5.5)
    await create_anime("High", rating=9.2)
    await create_anime("Mid", rating=7.0)
    body = (await async_client.get(f"{API}/animes", params={"order": "Rating (High-Low)"})).json()
    assert [a["title"] for a in body["data"]] == ["High", "Mid", "Low"]
    assert body["data"][0]["rating"] == pytest.approx(9.2)


# ─────────────────────────────────────────────────────────────
# GET /animes/search (autocomplete)
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_autocomplete(async_client: AsyncClient, create_anime):
    for title in ("Naruto", "Naruto Shippuden", "One Piece"):
        await create_anime(title)

    short = await async_client.get(f"{API}/animes/search", params={"q": "n"})
    assert short.json() == {"data": []}

    hits = (await async_client.get(f"{API}/animes/search", params={"q": "naru", "limit": "1"})).json()["data"]
    assert [h["title"] for h in hits] == ["Naruto"]


# ─────────────────────────────────────────────────────────────
# GET /animes/{id}, GET /genres
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_get_one_and_missing(async_client: AsyncClient, create_anime):
    anime = await create_anime("Mushishi", release_year=2005)
    resp = await async_client.get(f"{API}/animes/{anime.id}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Mushishi"
    assert body["type"] == "TV"
    assert body["status"] == "Ongoing"
    assert body["genres"] == []

    missing = await async_client.get(f"{API}/animes/999999")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Anime not found"}


@pytest.mark.anyio
async def test_genres_sorted_by_name(async_client: AsyncClient, create_genre):
    for name in ("Slice of Life", "Action", "Mecha"):
        await create_genre(name)
    body = (await async_client.get(f"{API}/genres")).json()
    assert [g["name"] for g in body["data"]] == ["Action", "Mecha", "Slice of Life"]


# ─────────────────────────────────────────────────────────────
# Admin writes
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_admin_create_update_delete_anime(admin_client, create_genre):
    client, _ = admin_client
    action = await create_genre("Action")
    comedy = await create_genre("Comedy")

    created = await client.post(
        f"{API}/animes",
        json={
            "title": "  Gintama  ",
            "type": "TV",
            "status": "Completed",
            "releaseYear": 2006,
            "rating": 9.04,
            "genres": [comedy.id, action.id],
        },
    )
    assert created.status_code == 201, created.text
    body = created.json()
    assert body["title"] == "Gintama"
    assert body["rating"] == pytest.approx(9.0)
    assert [g["name"] for g in body["genres"]] == ["Action", "Comedy"]

    updated = await client.put(f"{API}/animes/{body['id']}", json={"featured": True, "genres": [comedy.id]})
    assert updated.status_code == 200, updated.text
    assert updated.json()["featured"] is True
    assert updated.json()["title"] == "Gintama"
    assert [g["name"] for g in updated.json()["genres"]] == ["Comedy"]

    deleted = await client.delete(f"{API}/animes/{body['id']}")
    assert deleted.status_code == 204
    assert (await client.get(f"{API}/animes/{body['id']}")).status_code == 404
    assert (await client.delete(f"{API}/animes/{body['id']}")).status_code == 404


@pytest.mark.anyio
async def test_admin_create_anime_validation(admin_client):
    client, _ = admin_client
    resp = await client.post(f"{API}/animes", json={"title": "", "type": "Cartoon", "status": "Ongoing"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert set(body["error"]) >= {"title", "type"}


@pytest.mark.anyio
async def test_admin_create_anime_unknown_genre(admin_client):
    client, _ = admin_client
    resp = await client.post(
        f"{API}/animes", json={"title": "Orphan", "type": "TV", "status": "Upcoming", "genres": [4242]}
    )
    assert resp.status_code == 400
    assert "genres" in resp.json()["error"]


@pytest.mark.anyio
async def test_admin_update_missing_anime(admin_client):
    client, _ = admin_client
    resp = await client.put(f"{API}/animes/31337", json={"title": "Nope"})
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_admin_genre_lifecycle(admin_client, create_anime):
    client, _ = admin_client
    created = await client.post(f"{API}/genres", json={"name": "Isekai"})
    assert created.status_code == 201
    genre_id = created.json()["id"]

    dup = await client.post(f"{API}/genres", json={"name": "Isekai"})
    assert dup.status_code == 400
    assert dup.json()["message"] == "Genre already exists"

    anime = await create_anime("Re:Zero", genre_ids=[genre_id])
    assert (await client.delete(f"{API}/genres/{genre_id}")).status_code == 204
    assert (await client.delete(f"{API}/genres/{genre_id}")).status_code == 404

    remaining = (await client.get(f"{API}/animes/{anime.id}")).json()
    assert remaining["genres"] == []
