import os

import openai


def openai_client_factory(token: str | None = None, *, timeout: float = 60) -> openai.AsyncClient:
    token = os.environ.get("OPENAI_API_KEY") if token is None else token
    return openai.AsyncClient(api_key=token, timeout=timeout)


async def quick_chat(
    msg: str,
    *,
    model: str,
    openai_client: openai.AsyncClient | None = None,
    system: str | None = None,
) -> str:
    openai_client = openai_client_factory() if openai_client is None else openai_client
    messages: list[dict[str, str]] = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": msg})
    resp = await openai_client.chat.completions.create(
        model=model,
        messages=messages,  # pyright: ignore[reportArgumentType]
    )
    ans = resp.choices[0].message.content or ""
    return ans.strip()
