"""
FastAPI usage example.

This example demonstrates putting contentgate in front of a content API:
- Building a gateway from configuration
- Serving attributes from an in-memory provider
- Reading the forwarded context and listing filter in route handlers

Run with:

    CONTENTGATE_JWT_SECRET=... uvicorn examples.fastapi_app:app
"""

from fastapi import FastAPI, HTTPException, Request

from contentgate import AuthorizationGateway, GatewayConfig, ResourceType
from contentgate.middleware import AuthorizationMiddleware
from contentgate.resources import MemoryAttributeProvider

provider = MemoryAttributeProvider()
provider.put(ResourceType.ARTICLE, "welcome", category="free", status="published",
             owner_id="author-1", title="Welcome")
provider.put(ResourceType.ARTICLE, "deep-dive", category="premium", status="published",
             owner_id="author-1", title="Deep dive")

gateway = AuthorizationGateway.from_config(GatewayConfig.from_env(), provider=provider)

app = FastAPI(title="contentgate example")
app.add_middleware(AuthorizationMiddleware, gateway=gateway, skip_paths=["/health"])


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/articles")
async def list_articles(request: Request):
    records = await provider.list_resources(ResourceType.ARTICLE, request.state.listing_filter)
    return [record.to_dict() for record in records]


@app.get("/articles/{article_id}")
async def get_article(article_id: str, request: Request):
    records = await provider.list_resources(ResourceType.ARTICLE)
    article = next((r for r in records if r.resource_id == article_id), None)
    if article is None:
        raise HTTPException(status_code=404, detail="Article not found")
    return {"article": article.to_dict(), "viewer": request.state.authorization["userId"]}
