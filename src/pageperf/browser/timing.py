"""Raw timing extraction and mapping into TimingBreakdown.

Navigation metrics come from the Navigation Timing, Paint Timing and
Largest Contentful Paint APIs via page.evaluate(). Timespans install an
in-page marker and PerformanceObservers that are read back when the
timespan closes.
"""

from typing import Dict, Any, Optional
import logging

from playwright.async_api import Page

from pageperf.models.perf_models import TimingBreakdown

logger = logging.getLogger(__name__)


NAVIGATION_TIMING_JS = """
() => {
    return new Promise((resolve) => {
        const nav = performance.getEntriesByType('navigation')[0];
        const paint = performance.getEntriesByType('paint');
        const fcpEntry = paint.find(entry => entry.name === 'first-contentful-paint');
        const resources = performance.getEntriesByType('resource');

        const metrics = {
            ttfb: null,
            fcp: fcpEntry ? fcpEntry.startTime : null,
            lcp: null,
            cls: 0,
            dom_content_loaded: null,
            load_complete: null,
            total_requests: resources.length + (nav ? 1 : 0),
            transfer_size_bytes: resources.reduce(
                (total, r) => total + (r.transferSize || 0),
                nav ? (nav.transferSize || 0) : 0
            )
        };

        if (nav) {
            metrics.ttfb = nav.responseStart - nav.requestStart;
            metrics.dom_content_loaded = nav.domContentLoadedEventEnd - nav.startTime;
            metrics.load_complete = nav.loadEventEnd - nav.startTime;
        }

        // LCP and layout shifts are only exposed to buffered observers
        const observers = [];
        const observe = (type, callback) => {
            try {
                const observer = new PerformanceObserver((list) => callback(list.getEntries()));
                observer.observe({ type: type, buffered: true });
                observers.push(observer);
            } catch (e) {
                // entry type not supported by this browser
            }
        };
        observe('largest-contentful-paint', (entries) => {
            const last = entries[entries.length - 1];
            if (last) {
                metrics.lcp = last.renderTime || last.loadTime || last.startTime;
            }
        });
        observe('layout-shift', (entries) => {
            for (const entry of entries) {
                if (!entry.hadRecentInput) {
                    metrics.cls += entry.value;
                }
            }
        });

        setTimeout(() => {
            observers.forEach(observer => observer.disconnect());
            resolve(metrics);
        }, 100);
    });
}
"""

START_TIMESPAN_JS = """
() => {
    const state = {
        start: performance.now(),
        resourceCount: performance.getEntriesByType('resource').length,
        cls: 0,
        observer: null
    };
    try {
        state.observer = new PerformanceObserver((list) => {
            for (const entry of list.getEntries()) {
                if (!entry.hadRecentInput) {
                    state.cls += entry.value;
                }
            }
        });
        state.observer.observe({ type: 'layout-shift' });
    } catch (e) {
        state.observer = null;
    }
    window.__pageperfTimespan = state;
    return state.start;
}
"""

END_TIMESPAN_JS = """
() => {
    const state = window.__pageperfTimespan;
    if (!state) {
        return null;
    }
    if (state.observer) {
        state.observer.disconnect();
    }
    const resources = performance.getEntriesByType('resource').slice(state.resourceCount);
    delete window.__pageperfTimespan;
    return {
        in_page_duration_ms: performance.now() - state.start,
        cls: state.cls,
        total_requests: resources.length,
        transfer_size_bytes: resources.reduce((total, r) => total + (r.transferSize || 0), 0)
    };
}
"""


class TimingCollector:
    """Collect raw timing data from a Playwright page.

    Collection failures never fail a scenario: they are logged and an
    empty result is returned, leaving the wall-clock duration as the only
    populated field.
    """

    async def collect_navigation(self, page: Page) -> Dict[str, Any]:
        try:
            raw = await page.evaluate(NAVIGATION_TIMING_JS)
            logger.debug(f"Navigation timing collected: {raw}")
            return raw or {}
        except Exception as e:
            logger.warning(f"Failed to collect navigation timing: {e}")
            return {}

    async def start_timespan(self, page: Page) -> None:
        try:
            await page.evaluate(START_TIMESPAN_JS)
        except Exception as e:
            # Navigation may have replaced the document; the wall clock still runs
            logger.warning(f"Failed to install timespan marker: {e}")

    async def end_timespan(self, page: Page) -> Dict[str, Any]:
        try:
            raw = await page.evaluate(END_TIMESPAN_JS)
        except Exception as e:
            logger.warning(f"Failed to read timespan marker: {e}")
            return {}
        if raw is None:
            logger.debug("Timespan marker missing, page navigated during interaction")
            return {}
        return raw


def _kb(raw: Dict[str, Any]) -> Optional[float]:
    size = raw.get("transfer_size_bytes")
    return None if size is None else size / 1024


def build_navigation_breakdown(raw: Dict[str, Any], duration_ms: float) -> TimingBreakdown:
    """Map raw navigation timing into a TimingBreakdown.

    TTI is approximated as DOMContentLoaded plus 80% of the gap to load
    complete, matching the estimate used when no long-task data exists.
    """
    dcl = raw.get("dom_content_loaded")
    load = raw.get("load_complete")
    tti = None
    if dcl is not None and load is not None:
        tti = dcl + (load - dcl) * 0.8

    return TimingBreakdown(
        ttfb=raw.get("ttfb"),
        fcp=raw.get("fcp"),
        lcp=raw.get("lcp"),
        cls=raw.get("cls"),
        dom_content_loaded=dcl,
        load_complete=load,
        tti=tti,
        total_requests=raw.get("total_requests"),
        transfer_size_kb=_kb(raw),
        duration_ms=duration_ms,
    )


def build_timespan_breakdown(raw: Dict[str, Any], duration_ms: float) -> TimingBreakdown:
    """Map raw timespan data into a TimingBreakdown."""
    return TimingBreakdown(
        cls=raw.get("cls"),
        total_requests=raw.get("total_requests"),
        transfer_size_kb=_kb(raw),
        in_page_duration_ms=raw.get("in_page_duration_ms"),
        duration_ms=duration_ms,
    )
