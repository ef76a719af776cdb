"""
Thin requests-based client for the Medora API.

Tokens live in an AuthStore. A call that comes back 401 triggers one
refresh attempt and, if that works, one retry of the original call.
Checkout totals are computed here, the same way the storefront does it.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from medora.client.auth_store import AuthStore
from medora.client.cart import CartStore

logger = logging.getLogger(__name__)

FREE_DELIVERY_THRESHOLD = 1000.0
DELIVERY_FEE = 60.0


class ApiError(Exception):
    """Non-2xx response. Carries the server's {error, details} envelope."""

    def __init__(self, status_code: int, message: str, details: Optional[List[Dict[str, str]]] = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.details = details or []


def delivery_fee_for(subtotal: float) -> float:
    return 0.0 if subtotal >= FREE_DELIVERY_THRESHOLD else DELIVERY_FEE


class MedoraClient:
    def __init__(
        self,
        base_url: str,
        auth: AuthStore,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ):
        self.base_url = base_url.rstrip("/")
        self.auth = auth
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # plumbing
    # ------------------------------------------------------------------

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.auth.access_token:
            headers["Authorization"] = f"Bearer {self.auth.access_token}"
        return headers

    def _request(self, method: str, path: str, retry: bool = True, **kwargs) -> Any:
        response = self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=self._headers(),
            timeout=self.timeout,
            **kwargs,
        )

        if response.status_code == 401 and retry and self.auth.refresh_token:
            if self.refresh():
                return self._request(method, path, retry=False, **kwargs)

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            raise ApiError(
                response.status_code,
                body.get("error") or f"HTTP {response.status_code}",
                body.get("details"),
            )
        return response.json()

    def refresh(self) -> bool:
        """Swap the stored refresh token for a new access token. Logs out locally on failure."""
        response = self.session.request(
            "POST",
            f"{self.base_url}/api/auth/refresh",
            json={"refreshToken": self.auth.refresh_token},
            timeout=self.timeout,
        )
        if response.status_code != 200:
            logger.info(f"Token refresh failed with {response.status_code}; clearing session")
            self.auth.logout()
            return False
        self.auth.set_access_token(response.json()["accessToken"])
        return True

    # ------------------------------------------------------------------
    # auth
    # ------------------------------------------------------------------

    def register(self, name: str, password: str, email: Optional[str] = None, phone: Optional[str] = None) -> Dict:
        body = {"name": name, "password": password}
        if email:
            body["email"] = email
        if phone:
            body["phone"] = phone
        data = self._request("POST", "/api/auth/register", retry=False, json=body)
        self.auth.set_auth(data["user"], data["accessToken"], data["refreshToken"])
        return data["user"]

    def login(self, email_or_phone: str, password: str) -> Dict:
        data = self._request(
            "POST",
            "/api/auth/login",
            retry=False,
            json={"emailOrPhone": email_or_phone, "password": password},
        )
        self.auth.set_auth(data["user"], data["accessToken"], data["refreshToken"])
        return data["user"]

    def logout(self) -> None:
        if self.auth.refresh_token:
            try:
                self._request(
                    "POST", "/api/auth/logout", retry=False, json={"refreshToken": self.auth.refresh_token}
                )
            except ApiError as e:
                logger.info(f"Server-side logout failed: {e}")
        self.auth.logout()

    def me(self) -> Dict:
        return self._request("GET", "/api/auth/me")["user"]

    # ------------------------------------------------------------------
    # catalog
    # ------------------------------------------------------------------

    def list_medicines(self, **params) -> Dict:
        """Query params are passed as given, e.g. query="napa", sortBy="price", page=2."""
        return self._request("GET", "/api/medicines", params=params)

    def get_medicine(self, slug: str) -> Dict:
        return self._request("GET", f"/api/medicines/{slug}")

    def list_categories(self, **params) -> List[Dict]:
        return self._request("GET", "/api/categories", params=params)["categories"]

    # ------------------------------------------------------------------
    # orders / prescriptions
    # ------------------------------------------------------------------

    def checkout(
        self,
        cart: CartStore,
        delivery_address: str,
        delivery_city: str,
        delivery_state: str,
        delivery_zip_code: str,
        delivery_phone: str,
        payment_method: str = "cash",
        prescription_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> Dict:
        """Place an order for everything in the cart. The cart is cleared only when the order is accepted."""
        if not cart.items:
            raise ValueError("Cart is empty")

        subtotal = cart.total_price()
        delivery_fee = delivery_fee_for(subtotal)
        body = {
            "items": [
                {"medicineId": i.medicine_id, "quantity": i.quantity, "price": i.unit_price}
                for i in cart.items
            ],
            "deliveryAddress": delivery_address,
            "deliveryCity": delivery_city,
            "deliveryState": delivery_state,
            "deliveryZipCode": delivery_zip_code,
            "deliveryPhone": delivery_phone,
            "paymentMethod": payment_method,
            "subtotal": subtotal,
            "deliveryFee": delivery_fee,
            "total": subtotal + delivery_fee,
        }
        if prescription_id is not None:
            body["prescriptionId"] = prescription_id
        if notes:
            body["notes"] = notes

        data = self._request("POST", "/api/orders", json=body)
        cart.clear()
        return data

    def list_orders(self, **params) -> Dict:
        return self._request("GET", "/api/orders", params=params)

    def get_order(self, order_id: int) -> Dict:
        return self._request("GET", f"/api/orders/{order_id}")

    def upload_prescription(
        self,
        image: str,
        patient_name: Optional[str] = None,
        phone: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Dict:
        body = {"image": image}
        if patient_name:
            body["patientName"] = patient_name
        if phone:
            body["phone"] = phone
        if notes:
            body["notes"] = notes
        return self._request("POST", "/api/prescriptions", json=body)

    def list_prescriptions(self) -> List[Dict]:
        return self._request("GET", "/api/prescriptions")["prescriptions"]
