"""
Image synthesis gateway — powered by Google Gemini native image generation.

Two operations:
  - synthesize: put one catalog product on the model in a base image, keeping
    everything already worn (the try-on chain calls this once per step)
  - edit: free-form instruction on an image, optionally guided by a second image

Async wrapper around the sync google-genai SDK: blocking calls run in a worker
thread via asyncio.to_thread. Every failure surfaces as GenerationFailure.
"""

import asyncio
import logging
from typing import Optional, Sequence

import httpx

from ..core.config import Settings
from ..core.errors import GenerationFailure
from ..schemas import Model, ProductReference
from .images import ImageRef, load_image, to_data_url
from .styling import categorize, placement_instruction

logger = logging.getLogger(__name__)


class ImageSynthesisGateway:
    """
    Base class for image backends. Subclass and implement synthesize() and edit().

    Consumed by the step orchestrator (one synthesize() per step) and the
    lookbook manager (edit()).
    """

    async def synthesize(
        self,
        base_image: ImageRef,
        subject: Model,
        product: ProductReference,
        context: Sequence[ProductReference],
    ) -> ImageRef:
        """Apply `product` to `base_image`. `context` lists products already worn, in order."""
        raise NotImplementedError(f"{type(self).__name__} must implement synthesize()")

    async def edit(
        self,
        base_image: ImageRef,
        instruction: str,
        guide_image: Optional[ImageRef] = None,
    ) -> ImageRef:
        """Apply a free-form edit instruction to `base_image`."""
        raise NotImplementedError(f"{type(self).__name__} must implement edit()")

    async def close(self) -> None:
        return None


# ── Prompts ──────────────────────────────────────────────────────────


def build_tryon_prompt(
    subject: Model,
    product: ProductReference,
    context: Sequence[ProductReference],
) -> str:
    """Build the try-on prompt for one step of the chain."""
    if context:
        worn = "\n    ".join(f"- {p.name} ({categorize(p).value})" for p in context)
    else:
        worn = "None"

    return f"""You are a world-class fashion stylist and photo editor specializing in hyper-realistic virtual try-ons.

**Primary Task:**
{placement_instruction(subject, product, context)}

**Image Analysis:**
- **Base Image:** A full-body photo of a model.
- **Product Image:** A photo of the new product to be added.

**Critical Directives:**
1.  **Identity Preservation:** The model's face, body shape, hair, pose, skin tone, and the studio background MUST remain IDENTICAL to the base image. DO NOT alter the model's identity.
2.  **Item Fidelity:** The new product ('{product.name}') MUST be an EXACT, photorealistic replica of the product image. Replicate its color, texture, fit, drape, and details (buttons, seams, logos) with perfect accuracy.
3.  **Contextual Integrity:** The model is already wearing these items, which must be perfectly preserved unless being replaced by the primary task:
    {worn}
4.  **Seamless Integration:** The final image must be a single, cohesive, photorealistic image. Ensure realistic lighting, shadows, and interaction between the new clothing and the model's body.

**Final Output:**
Return ONLY the complete, full-body, modified image."""


def build_edit_prompt(instruction: str, guided: bool = False) -> str:
    """Build the conversational edit prompt."""
    prompt = f"""You are an expert photo editor. The user wants to modify an image.
**CRITICAL INSTRUCTION:** Apply the user's request precisely to the provided base image.
**User's Request:** "{instruction}"

**RULES:**
1.  **Preserve Identity:** Maintain the model's identity, pose, and the overall composition of the base image unless specifically asked to change them.
2.  **Realism:** The final image must be photorealistic and seamlessly edited.
3.  **Output:** Return ONLY the modified image. Do not add text or commentary."""
    if guided:
        prompt += (
            "\n4.  **Reference:** The second image is a visual reference for the request. "
            "Use it to guide the edit; do not paste it in verbatim."
        )
    return prompt


# ── Gemini implementation ────────────────────────────────────────────


class GeminiImageGateway(ImageSynthesisGateway):
    """Gemini-backed gateway. One SDK client per gateway, created lazily."""

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        self.api_key = settings.gemini_api_key
        self.model_name = settings.gemini_image_model
        self.fetch_timeout = settings.image_fetch_timeout
        self._genai_client = None
        self._http = http_client

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self.fetch_timeout)
        return self._http

    def _get_genai_client(self):
        """Lazy-load and cache the google-genai client.

        The client must stay referenced: if it is garbage-collected its internal
        httpx connection closes and in-flight calls fail.
        """
        if self._genai_client is not None:
            return self._genai_client
        if not self.api_key:
            raise GenerationFailure("GEMINI_API_KEY is required for image generation")
        from google import genai

        self._genai_client = genai.Client(api_key=self.api_key)
        return self._genai_client

    # ── Sync (runs in a worker thread) ───────────────────────────────

    def _sync_generate(self, prompt: str, images: list[tuple[bytes, str]]) -> ImageRef:
        """Send prompt + images, return the first generated image as a data URL."""
        from google.genai import types

        client = self._get_genai_client()
        contents: list = [prompt]
        contents.extend(types.Part.from_bytes(data=data, mime_type=mime) for data, mime in images)

        response = client.models.generate_content(
            model=self.model_name,
            contents=contents,
            config=types.GenerateContentConfig(
                response_modalities=["TEXT", "IMAGE"],
            ),
        )

        response_text = ""
        candidates = response.candidates or []
        parts = (candidates[0].content.parts or []) if candidates and candidates[0].content else []
        for part in parts:
            if part.inline_data is not None and part.inline_data.data:
                return to_data_url(part.inline_data.data, part.inline_data.mime_type)
            if part.text:
                response_text += part.text

        if response_text:
            logger.warning("Gemini returned text but no image: %s", response_text[:200])
        raise GenerationFailure("No image was generated.")

    async def _generate(self, prompt: str, images: list[tuple[bytes, str]]) -> ImageRef:
        try:
            return await asyncio.to_thread(self._sync_generate, prompt, images)
        except GenerationFailure:
            raise
        except Exception as e:
            logger.error("Gemini image generation failed: %s", e)
            raise GenerationFailure(f"Image generation failed: {e}") from e

    # ── Async public API ─────────────────────────────────────────────

    async def synthesize(
        self,
        base_image: ImageRef,
        subject: Model,
        product: ProductReference,
        context: Sequence[ProductReference],
    ) -> ImageRef:
        product_url = product.primary_image
        if not product_url:
            raise GenerationFailure(f"No image found for SKU {product.sku}")

        model_part = await load_image(base_image, self.http)
        product_part = await load_image(product_url, self.http)

        prompt = build_tryon_prompt(subject, product, context)
        logger.info(
            "Try-on request: sku=%s model=%s context=%d",
            product.sku, subject.name, len(context),
        )
        try:
            return await self._generate(prompt, [model_part, product_part])
        except GenerationFailure as e:
            raise GenerationFailure(f"Virtual try-on failed for {product.sku}: {e}") from e

    async def edit(
        self,
        base_image: ImageRef,
        instruction: str,
        guide_image: Optional[ImageRef] = None,
    ) -> ImageRef:
        images = [await load_image(base_image, self.http)]
        if guide_image:
            images.append(await load_image(guide_image, self.http))

        logger.info("Edit request: %s...", instruction[:80])
        try:
            return await self._generate(build_edit_prompt(instruction, bool(guide_image)), images)
        except GenerationFailure as e:
            raise GenerationFailure(f"Image editing failed: {e}") from e

    async def close(self) -> None:
        if self._http and not self._http.is_closed:
            await self._http.aclose()
            self._http = None
