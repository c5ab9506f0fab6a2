from __future__ import annotations

import numpy as np

# Roots closer to zero than SNAP_REL * radius are treated as touching hits (t = 0),
# and an origin within that distance of the sphere counts as lying on it.
SNAP_REL = 1e-9


def ray_sphere_hits(
    origin: np.ndarray,
    direction: np.ndarray,
    center: np.ndarray,
    radius: float,
) -> list[float]:
    """
    All non-negative ray parameters t where origin + t*direction lies on the sphere.

    direction need not be unit length; t is measured in units of |direction|.
    Returns an ascending list, empty if the ray misses or the sphere is behind it.
    """
    o = np.asarray(origin, dtype=np.float64)
    d = np.asarray(direction, dtype=np.float64)
    oc = o - np.asarray(center, dtype=np.float64)

    a = float(np.dot(d, d))
    if a == 0.0:
        return []
    b = 2.0 * float(np.dot(oc, d))
    c = float(np.dot(oc, oc)) - radius * radius
    disc = b * b - 4.0 * a * c
    if c <= 2.0 * SNAP_REL * radius * radius:
        # origin on or inside the sphere: always at least a touching hit
        disc = max(disc, 0.0)
    if disc < 0.0:
        return []

    sqrt_disc = float(np.sqrt(disc))
    # solutions: (-b ± sqrt_disc) / 2a
    roots = sorted({(-b - sqrt_disc) / (2.0 * a), (-b + sqrt_disc) / (2.0 * a)})
    tol = SNAP_REL * abs(radius) / np.sqrt(a)
    out: list[float] = []
    for t in roots:
        if abs(t) <= tol:
            t = 0.0
        if t >= 0.0:
            out.append(float(t))
    return out


def closest_positive_hit(hits: list[float]) -> float:
    """Smallest strictly positive hit; 0.0 when there is none."""
    pos = [t for t in hits if t > 0.0]
    if not pos:
        return 0.0
    return min(pos)


def ray_sphere_intersect(
    origins: np.ndarray,
    dirs: np.ndarray,
    center: np.ndarray,
    radius: float,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Vectorized form of ray_sphere_hits + closest_positive_hit.

    origins: (N,3), dirs: (N,3) or (3,) (not necessarily unit), center (3,), radius scalar.
    Returns:
      hit_mask: (N,) bool, True where the ray has at least one non-negative hit
      t: (N,) closest strictly positive hit, 0.0 for touching-only hits, NaN on miss
    """
    origins = np.asarray(origins, dtype=np.float64)
    dirs = np.broadcast_to(np.asarray(dirs, dtype=np.float64), origins.shape)
    oc = origins - np.asarray(center, dtype=np.float64)[None, :]

    # component sums written out so every ray is evaluated with the same operation order
    a = dirs[:, 0] * dirs[:, 0] + dirs[:, 1] * dirs[:, 1] + dirs[:, 2] * dirs[:, 2]
    b = 2.0 * (oc[:, 0] * dirs[:, 0] + oc[:, 1] * dirs[:, 1] + oc[:, 2] * dirs[:, 2])
    c = (oc[:, 0] * oc[:, 0] + oc[:, 1] * oc[:, 1] + oc[:, 2] * oc[:, 2]) - radius * radius
    disc = b * b - 4.0 * a * c
    disc = np.where(c <= 2.0 * SNAP_REL * radius * radius, np.maximum(disc, 0.0), disc)

    n = origins.shape[0]
    t = np.full(n, np.nan, dtype=np.float64)
    hit = (disc >= 0.0) & (a > 0.0)
    if not np.any(hit):
        return hit, t

    a_hit = a[hit]
    b_hit = b[hit]
    sqrt_disc = np.sqrt(np.maximum(disc[hit], 0.0))
    t0 = (-b_hit - sqrt_disc) / (2.0 * a_hit)
    t1 = (-b_hit + sqrt_disc) / (2.0 * a_hit)
    tol = SNAP_REL * abs(radius) / np.sqrt(a_hit)
    t0 = np.where(np.abs(t0) <= tol, 0.0, t0)
    t1 = np.where(np.abs(t1) <= tol, 0.0, t1)

    t_hit = np.where(t0 > 0.0, t0, np.where(t1 > 0.0, t1, 0.0))
    any_non_negative = t1 >= 0.0

    hit_idx = np.where(hit)[0]
    hit_final = np.zeros(n, dtype=bool)
    hit_final[hit_idx[any_non_negative]] = True
    t[hit_idx[any_non_negative]] = t_hit[any_non_negative]
    return hit_final, t
