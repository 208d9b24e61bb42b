# elite_cards.services.shopify.client

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Any, Mapping
from urllib.parse import urlencode

import httpx

from elite_cards.core.config import Settings
from elite_cards.core.exceptions import ShopifyAPIError
from elite_cards.core.security import verify_shopify_hmac

logger = logging.getLogger(__name__)

VENDOR = "Elite Cards"
PRODUCT_TYPE = "Trading Cards"
DEFAULT_INVENTORY_QUANTITY = 100


@dataclass
class ShopifyResult:
    """Outcome of a product call against a merchant's store"""
    success: bool
    product_id: Optional[str] = None
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


@dataclass
class CallbackResult:
    """Outcome of validating an OAuth callback"""
    success: bool
    shop: Optional[str] = None
    access_token: Optional[str] = None
    scope: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class ShopifyProductInput:
    """Catalog data needed to create a product on a merchant's store"""
    title: str
    description: str
    price: float
    image_url: Optional[str]
    set_name: str
    expansion: Optional[str] = None
    is_single: bool = False
    variants: Optional[List[Dict[str, Any]]] = None


class ShopifyClient:
    """
    Client for the Shopify OAuth flow and the Admin REST product endpoints.

    One instance serves every merchant: app credentials are held on the
    client while each merchant's shop domain and access token are passed in
    per call.

    Product methods never raise for platform errors. Non-2xx responses and
    network failures are captured in a ShopifyResult so bulk workflows can
    record them per item.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        scopes: List[str],
        api_version: str = "2024-10",
        verify_hmac: bool = True,
        timeout: float = 30.0
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.scopes = scopes
        self.api_version = api_version
        self.verify_hmac_enabled = verify_hmac
        self.timeout = timeout
        logger.debug(f"ShopifyClient initialized (API version {api_version}, scopes {','.join(scopes)})")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ShopifyClient":
        return cls(
            api_key=settings.SHOPIFY_API_KEY,
            api_secret=settings.SHOPIFY_API_SECRET,
            scopes=settings.shopify_scope_list,
            api_version=settings.SHOPIFY_API_VERSION,
            verify_hmac=settings.SHOPIFY_VERIFY_HMAC,
            timeout=settings.SHOPIFY_TIMEOUT,
        )

    # --- OAuth ---

    def get_auth_url(self, shop: str, redirect_uri: str, state: Optional[str] = None) -> str:
        """
        Build the Shopify authorize URL for a store.

        Args:
            shop: Normalized shop domain (name.myshopify.com)
            redirect_uri: Where Shopify sends the merchant back with a code
            state: Optional nonce echoed back on the callback

        Returns:
            str: Authorize URL
        """
        params = {
            "client_id": self.api_key,
            "scope": ",".join(self.scopes),
            "redirect_uri": redirect_uri,
        }
        if state:
            params["state"] = state
        return f"https://{shop}/admin/oauth/authorize?{urlencode(params)}"

    def verify_hmac(self, params: Mapping[str, str]) -> bool:
        return verify_shopify_hmac(params, self.api_secret)

    async def validate_callback(
        self,
        code: Optional[str],
        shop: Optional[str],
        hmac: Optional[str] = None,
        state: Optional[str] = None,
        params: Optional[Mapping[str, str]] = None
    ) -> CallbackResult:
        """
        Validate an OAuth callback and exchange the code for an access token.

        The exchange is attempted once. Failures are returned, not raised.

        Args:
            code: Authorization code
            shop: Shop domain from the callback
            hmac: Signature Shopify attached to the callback
            state: Nonce echoed back by Shopify
            params: Full callback query, used for HMAC verification

        Returns:
            CallbackResult
        """
        if not code or not shop:
            return CallbackResult(success=False, error="Missing code or shop parameter", reason="missing_parameters")

        if not self.api_key or not self.api_secret:
            logger.error("Shopify API credentials are not configured")
            return CallbackResult(success=False, error="Shopify credentials not configured", reason="credentials_not_configured")

        if self.verify_hmac_enabled:
            query = dict(params or {})
            query.setdefault("code", code)
            query.setdefault("shop", shop)
            if hmac:
                query["hmac"] = hmac
            if state:
                query.setdefault("state", state)
            if not self.verify_hmac(query):
                logger.warning(f"HMAC verification failed for OAuth callback from {shop}")
                return CallbackResult(success=False, shop=shop, error="HMAC verification failed", reason="invalid_hmac")

        token_url = f"https://{shop}/admin/oauth/access_token"
        payload = {
            "client_id": self.api_key,
            "client_secret": self.api_secret,
            "code": code,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method="POST",
                    url=token_url,
                    headers={"Content-Type": "application/json", "Accept": "application/json"},
                    json=payload
                )
        except httpx.TimeoutException as e:
            logger.error(f"Timed out exchanging OAuth code for {shop}: {str(e)}")
            return CallbackResult(success=False, shop=shop, error=f"Request timed out: {str(e)}", reason="exchange_failed")
        except httpx.RequestError as e:
            logger.error(f"Network error exchanging OAuth code for {shop}: {str(e)}")
            return CallbackResult(success=False, shop=shop, error=f"Network error: {str(e)}", reason="exchange_failed")

        if response.status_code != 200:
            logger.error(f"Token exchange failed for {shop}: {response.status_code} {response.text}")
            return CallbackResult(
                success=False,
                shop=shop,
                error=f"Token exchange failed: {response.status_code} {response.text}",
                reason="exchange_failed"
            )

        data = response.json()
        access_token = data.get("access_token")
        if not access_token:
            logger.error(f"Token exchange for {shop} returned no access token")
            return CallbackResult(success=False, shop=shop, error="No access token in response", reason="exchange_failed")

        logger.info(f"Obtained access token for {shop} (scope: {data.get('scope')})")
        return CallbackResult(success=True, shop=shop, access_token=access_token, scope=data.get("scope"))

    # --- Admin REST ---

    async def _make_request(
        self,
        method: str,
        shop_domain: str,
        access_token: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None
    ) -> Dict:
        """
        Make a request to a merchant's Admin REST API

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            shop_domain: Merchant's shop domain
            access_token: Merchant's offline access token
            endpoint: API endpoint relative to /admin/api/<version>/
            data: Request payload for POST/PUT requests
            params: Query parameters

        Returns:
            Dict: Response data

        Raises:
            ShopifyAPIError: If the API request fails. `http_status` holds the
                HTTP status, or None for transport failures.
        """
        url = f"https://{shop_domain}/admin/api/{self.api_version}/{endpoint.lstrip('/')}"
        headers = {
            "X-Shopify-Access-Token": access_token,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        logger.debug(f"Making {method} request to {url}")
        if data:
            logger.debug(f"Data: {json.dumps(data)[:500]}...")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    json=data,
                    params=params
                )
        except httpx.TimeoutException as e:
            logger.error(f"Timeout error: {str(e)}")
            raise ShopifyAPIError(f"Request timed out: {str(e)}", http_status=None)
        except httpx.RequestError as e:
            logger.error(f"Network error: {str(e)}")
            raise ShopifyAPIError(f"Network error: {str(e)}", http_status=None)

        if response.status_code not in (200, 201, 202, 204):
            logger.error(f"Shopify API error from {shop_domain}: {response.status_code} {response.text}")
            raise ShopifyAPIError(f"Shopify API error: {response.status_code} {response.text}", http_status=response.status_code)

        if response.status_code == 204 or not response.content:
            return {}

        return response.json()

    @staticmethod
    def _error_result(error: ShopifyAPIError) -> ShopifyResult:
        return ShopifyResult(success=False, status_code=error.http_status, error=error.message)

    def build_product_payload(self, product: ShopifyProductInput) -> Dict[str, Any]:
        """Map a catalog product onto the Shopify product resource."""
        tags = ["elite-cards", product.set_name]
        if product.expansion:
            tags.append(product.expansion)
        if product.is_single:
            tags.append("single")

        payload: Dict[str, Any] = {
            "title": product.title,
            "body_html": product.description,
            "vendor": VENDOR,
            "product_type": PRODUCT_TYPE,
            "tags": ",".join(tags),
        }

        if product.variants:
            payload["options"] = [{"name": "Condition"}]
            payload["variants"] = [
                {
                    "option1": variant["option1"],
                    "price": f"{float(variant['price']):.2f}",
                    "sku": variant.get("sku"),
                    "inventory_management": "shopify",
                    "inventory_quantity": DEFAULT_INVENTORY_QUANTITY,
                }
                for variant in product.variants
            ]
        else:
            payload["variants"] = [
                {
                    "price": f"{float(product.price):.2f}",
                    "inventory_management": "shopify",
                    "inventory_quantity": DEFAULT_INVENTORY_QUANTITY,
                }
            ]

        if product.image_url:
            payload["images"] = [{"src": product.image_url, "alt": product.title}]

        return {"product": payload}

    async def create_product(self, access_token: str, shop_domain: str, product_data: ShopifyProductInput) -> ShopifyResult:
        """
        Create a product on a merchant's store.

        Args:
            access_token: Merchant's access token
            shop_domain: Merchant's shop domain
            product_data: Catalog product to publish

        Returns:
            ShopifyResult with the remote product id on success
        """
        try:
            response = await self._make_request(
                "POST", shop_domain, access_token, "products.json", data=self.build_product_payload(product_data)
            )
        except ShopifyAPIError as e:
            return self._error_result(e)

        remote_id = (response.get("product") or {}).get("id")
        if remote_id is None:
            return ShopifyResult(success=False, error="Shopify response did not include a product id")

        logger.info(f"Created Shopify product {remote_id} on {shop_domain}")
        return ShopifyResult(success=True, product_id=str(remote_id))

    async def delete_product(self, access_token: str, shop_domain: str, product_id: str) -> ShopifyResult:
        """Delete a product from a merchant's store. A 404 is reported via `not_found`."""
        try:
            await self._make_request("DELETE", shop_domain, access_token, f"products/{product_id}.json")
        except ShopifyAPIError as e:
            return self._error_result(e)

        logger.info(f"Deleted Shopify product {product_id} from {shop_domain}")
        return ShopifyResult(success=True, product_id=str(product_id))

    async def update_price(
        self,
        access_token: str,
        shop_domain: str,
        product_id: str,
        new_price: float,
        variant_prices: Optional[Dict[str, float]] = None
    ) -> ShopifyResult:
        """
        Update only the variant prices of a product on a merchant's store.

        Args:
            access_token: Merchant's access token
            shop_domain: Merchant's shop domain
            product_id: Remote product id
            new_price: Base price applied to variants not in variant_prices
            variant_prices: Optional price per condition label (variant option1)

        Returns:
            ShopifyResult
        """
        try:
            response = await self._make_request(
                "GET", shop_domain, access_token, f"products/{product_id}.json", params={"fields": "id,variants"}
            )
            remote_variants = (response.get("product") or {}).get("variants") or []

            variants = []
            for variant in remote_variants:
                price = new_price
                if variant_prices and variant.get("option1") in variant_prices:
                    price = variant_prices[variant["option1"]]
                variants.append({"id": variant["id"], "price": f"{float(price):.2f}"})

            if not variants:
                return ShopifyResult(success=False, product_id=str(product_id), error="Remote product has no variants")

            await self._make_request(
                "PUT",
                shop_domain,
                access_token,
                f"products/{product_id}.json",
                data={"product": {"id": int(product_id) if str(product_id).isdigit() else product_id, "variants": variants}}
            )
        except ShopifyAPIError as e:
            return self._error_result(e)

        logger.info(f"Updated price of Shopify product {product_id} on {shop_domain} to {new_price:.2f}")
        return ShopifyResult(success=True, product_id=str(product_id))
