import requests
from typing import Optional, Dict, Any, Sequence
import logging
import json
import time

from models import Anomaly, Facility, MaintenanceAlert, RouteScore, to_dict


class NarrativeClient:
    """Client for the external narrative service that explains anomalies, alerts and routes"""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        max_retries: int = 3,
        retry_delay: float = 1,
        timeout: float = 60,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if api_key:
            self.headers["API-KEY"] = api_key
        self.max_retries = max_retries
        self.retry_delay = retry_delay  # seconds
        self.timeout = timeout

    def _parse_response(self, response: requests.Response) -> Dict[str, Any]:
        """
        Parse API response

        Args:
            response: Response object from requests
        """
        try:
            if not response.text:
                logging.warning("Empty response received")
                return {}
            return response.json()

        except json.JSONDecodeError as e:
            logging.error(f"Failed to parse JSON response: {response.text}")
            logging.error(f"JSON decode error: {str(e)}")
            return {}

    def generate(self, prompt: str, context: Dict[str, Any]) -> Optional[str]:
        """
        Ask the narrative service for free text about the given context

        Returns:
            The generated text, or None if the service could not answer
        """
        payload = {"prompt": prompt, "context": context}

        for attempt in range(self.max_retries):
            try:
                response = requests.post(
                    f"{self.base_url}/api/narrative",
                    headers=self.headers,
                    json=payload,
                    timeout=self.timeout,
                )

                logging.info(f"Narrative response status: {response.status_code}")
                logging.debug(f"Narrative response body: {response.text}")

                if response.status_code == 200:
                    text = self._parse_response(response).get("response")
                    if not text:
                        logging.error("Narrative text not found in response")
                        return None
                    return text
                else:
                    logging.error(
                        f"Narrative request failed: {response.status_code} - {response.text}"
                    )
                    if attempt < self.max_retries - 1:
                        time.sleep(self.retry_delay)
                        continue
                    return None

            except requests.exceptions.RequestException as e:
                logging.error(f"Request failed while generating narrative: {str(e)}")
                if attempt < self.max_retries - 1:
                    time.sleep(self.retry_delay)
                    continue
                return None

        return None

    def explain_anomaly(self, anomaly: Anomaly, facility: Facility) -> Optional[str]:
        """Root cause analysis for an anomaly"""
        return self.generate(
            f"Explain the likely root cause of this {anomaly.type.value} at "
            f"{facility.name} and recommend immediate actions.",
            {"anomaly": to_dict(anomaly), "facility": to_dict(facility)},
        )

    def recommend_maintenance(
        self, alert: MaintenanceAlert, facility: Facility
    ) -> Optional[str]:
        """Maintenance plan for an alert"""
        return self.generate(
            f"Recommend a maintenance plan for {facility.name} "
            f"({alert.priority.value} priority, failure expected in "
            f"{alert.days_until_failure} days).",
            {"alert": to_dict(alert), "facility": to_dict(facility)},
        )

    def analyze_route(
        self, selected: RouteScore, ranked: Sequence[RouteScore]
    ) -> Optional[str]:
        return self.generate(
            "Analyze the selected route considering CO2 emissions, energy "
            "consumption, and operating costs. Compare it with the other routes "
            "and explain whether it is Pareto-optimal.",
            {"selectedRoute": to_dict(selected), "routes": to_dict(list(ranked))},
        )
