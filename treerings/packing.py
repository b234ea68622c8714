# ============================================================
# Sibling circle packing (2D)
# - front-chain placement: every new circle tangent to two on the chain
# - minimal enclosing circle, randomised incremental, fixed seed
# - all-pairs centre separation to clear floating point residue
# ============================================================

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

# circles are handled as three parallel lists (x, y, r) while placing; the
# public functions take and return numpy arrays

# ---------------- enclosing circle ----------------


def _encloses_weak(a: Tuple[float, float, float], b: Tuple[float, float, float]) -> bool:
    dr = a[2] - b[2] + max(a[2], b[2], 1.0) * 1e-9
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    return dr > 0 and dr * dr > dx * dx + dy * dy


def _encloses_not(a: Tuple[float, float, float], b: Tuple[float, float, float]) -> bool:
    dr = a[2] - b[2]
    dx = b[0] - a[0]
    dy = b[1] - a[1]
    return dr < 0 or dr * dr < dx * dx + dy * dy


def _encloses_weak_all(a, basis) -> bool:
    return all(_encloses_weak(a, b) for b in basis)


def _enclose_basis_2(a, b) -> Tuple[float, float, float]:
    x1, y1, r1 = a
    x2, y2, r2 = b
    x21, y21, r21 = x2 - x1, y2 - y1, r2 - r1
    dist = math.sqrt(x21 * x21 + y21 * y21)
    if dist == 0:
        return (x1, y1, max(r1, r2))
    return (
        (x1 + x2 + x21 / dist * r21) / 2,
        (y1 + y2 + y21 / dist * r21) / 2,
        (dist + r1 + r2) / 2,
    )


def _enclose_basis_3(a, b, c) -> Tuple[float, float, float]:
    x1, y1, r1 = a
    x2, y2, r2 = b
    x3, y3, r3 = c
    a2 = x1 - x2
    a3 = x1 - x3
    b2 = y1 - y2
    b3 = y1 - y3
    c2 = r2 - r1
    c3 = r3 - r1
    d1 = x1 * x1 + y1 * y1 - r1 * r1
    d2 = d1 - x2 * x2 - y2 * y2 + r2 * r2
    d3 = d1 - x3 * x3 - y3 * y3 + r3 * r3
    ab = a3 * b2 - a2 * b3
    if ab == 0:
        # collinear centres, the pair enclosure of the outermost two is exact enough
        return max(
            (_enclose_basis_2(a, b), _enclose_basis_2(a, c), _enclose_basis_2(b, c)),
            key=lambda e: e[2],
        )
    xa = (b2 * d3 - b3 * d2) / (ab * 2) - x1
    xb = (b3 * c2 - b2 * c3) / ab
    ya = (a3 * d2 - a2 * d3) / (ab * 2) - y1
    yb = (a2 * c3 - a3 * c2) / ab
    qa = xb * xb + yb * yb - 1
    qb = 2 * (r1 + xa * xb + ya * yb)
    qc = xa * xa + ya * ya - r1 * r1
    if abs(qa) > 1e-6:
        r = -(qb + math.sqrt(max(0.0, qb * qb - 4 * qa * qc))) / (2 * qa)
    else:
        r = -qc / qb
    return (x1 + xa + xb * r, y1 + ya + yb * r, r)


def _enclose_basis(basis) -> Tuple[float, float, float]:
    if len(basis) == 1:
        return basis[0]
    if len(basis) == 2:
        return _enclose_basis_2(basis[0], basis[1])
    return _enclose_basis_3(basis[0], basis[1], basis[2])


def _extend_basis(basis, p):
    if _encloses_weak_all(p, basis):
        return [p]

    for i in range(len(basis)):
        if _encloses_not(p, basis[i]) and _encloses_weak_all(
            _enclose_basis_2(basis[i], p), basis
        ):
            return [basis[i], p]

    for i in range(len(basis) - 1):
        for j in range(i + 1, len(basis)):
            if (
                _encloses_not(_enclose_basis_2(basis[i], basis[j]), p)
                and _encloses_not(_enclose_basis_2(basis[i], p), basis[j])
                and _encloses_not(_enclose_basis_2(basis[j], p), basis[i])
                and _encloses_weak_all(_enclose_basis_3(basis[i], basis[j], p), basis)
            ):
                return [basis[i], basis[j], p]

    # numerically degenerate basis, fall back to the widest pair containing p
    return [max(basis, key=lambda b: math.hypot(b[0] - p[0], b[1] - p[1]) + b[2]), p]


def enclose_circles(
    centers: np.ndarray, radii: Sequence[float], seed: int = 0
) -> Tuple[float, float, float]:
    """
    Smallest circle enclosing all given circles (Welzl style, randomised incremental).

    The visiting order is shuffled with a fixed seed, so the same input always gives the
    same (x, y, r) back.
    """
    P = np.asarray(centers, float).reshape(-1, 2)
    r = np.asarray(radii, float)
    n = len(r)
    if n == 0:
        return (0.0, 0.0, 0.0)

    order = np.random.default_rng(seed).permutation(n)
    circles = [(float(P[i, 0]), float(P[i, 1]), float(r[i])) for i in order]

    basis: List[Tuple[float, float, float]] = []
    e: Optional[Tuple[float, float, float]] = None
    i = 0
    while i < n:
        p = circles[i]
        if e is not None and _encloses_weak(e, p):
            i += 1
        else:
            basis = _extend_basis(basis, p)
            e = _enclose_basis(basis)
            i = 0
    return e


# ---------------- front-chain placement ----------------


def _place(xs, ys, rs, b: int, a: int, c: int):
    """Put circle c tangent to circles a and b."""
    dx = xs[b] - xs[a]
    dy = ys[b] - ys[a]
    d2 = dx * dx + dy * dy
    if d2:
        a2 = (rs[a] + rs[c]) ** 2
        b2 = (rs[b] + rs[c]) ** 2
        if a2 > b2:
            x = (d2 + b2 - a2) / (2 * d2)
            y = math.sqrt(max(0.0, b2 / d2 - x * x))
            xs[c] = xs[b] - x * dx - y * dy
            ys[c] = ys[b] - x * dy + y * dx
        else:
            x = (d2 + a2 - b2) / (2 * d2)
            y = math.sqrt(max(0.0, a2 / d2 - x * x))
            xs[c] = xs[a] + x * dx - y * dy
            ys[c] = ys[a] + x * dy + y * dx
    else:
        xs[c] = xs[a] + rs[c]
        ys[c] = ys[a]


def _intersects(xs, ys, rs, a: int, b: int) -> bool:
    dr = rs[a] + rs[b] - 1e-6
    dx = xs[b] - xs[a]
    dy = ys[b] - ys[a]
    return dr > 0 and dr * dr > dx * dx + dy * dy


def _score(xs, ys, rs, a: int, b: int) -> float:
    ab = rs[a] + rs[b]
    if ab <= 0:
        dx, dy = (xs[a] + xs[b]) / 2, (ys[a] + ys[b]) / 2
    else:
        dx = (xs[a] * rs[b] + xs[b] * rs[a]) / ab
        dy = (ys[a] * rs[b] + ys[b] * rs[a]) / ab
    return dx * dx + dy * dy


def _front_chain_2d(rs: List[float]) -> Tuple[List[float], List[float], List[int]]:
    """Place circles in the given order, returns centres and the final front chain."""
    n = len(rs)
    xs = [0.0] * n
    ys = [0.0] * n
    if n == 1:
        return xs, ys, [0]

    xs[0] = -rs[1]
    xs[1] = rs[0]
    if n == 2:
        return xs, ys, [0, 1]

    _place(xs, ys, rs, 1, 0, 2)
    nxt = [0] * n
    prv = [0] * n
    # chain a -> b -> c -> a
    a, b, c = 0, 1, 2
    nxt[a], prv[b] = b, a
    nxt[b], prv[c] = c, b
    nxt[c], prv[a] = a, c

    i = 3
    while i < n:
        c = i
        _place(xs, ys, rs, a, b, c)

        # closest intersecting circle on the chain, by linear distance along the chain
        j, k = nxt[b], prv[a]
        sj, sk = rs[b], rs[a]
        hit = False
        while True:
            if sj <= sk:
                if _intersects(xs, ys, rs, j, c):
                    b = j
                    nxt[a], prv[b] = b, a
                    hit = True
                    break
                sj += rs[j]
                j = nxt[j]
            else:
                if _intersects(xs, ys, rs, k, c):
                    a = k
                    nxt[a], prv[b] = b, a
                    hit = True
                    break
                sk += rs[k]
                k = prv[k]
            if j == nxt[k]:
                break
        if hit:
            continue

        # insert c between a and b
        prv[c], nxt[c] = a, b
        nxt[a] = c
        prv[b] = c
        b = c

        # new pair closest to the centroid
        best = _score(xs, ys, rs, a, nxt[a])
        node = nxt[c]
        while node != b:
            s = _score(xs, ys, rs, node, nxt[node])
            if s < best:
                a, best = node, s
            node = nxt[node]
        b = nxt[a]
        i += 1

    chain = [b]
    node = nxt[b]
    while node != b:
        chain.append(node)
        node = nxt[node]
    return xs, ys, chain


# ---------------- residue clean-up ----------------


def _push_apart_siblings(
    centers: np.ndarray, radii: np.ndarray, tol: float = 1e-9, max_sweeps: int = 60
) -> np.ndarray:
    """
    Nudge sibling centres until no two circles overlap by more than `tol`.

    Radii are left alone. Each overlapping pair is split along its centre line, the
    share of a circle shrinking with its area, so large siblings barely move.
    """
    centers = np.asarray(centers, float).copy()
    radii = np.asarray(radii, float)
    if len(radii) <= 1:
        return centers

    mobility = 1.0 / (radii * radii + 1e-12)
    first, second = np.triu_indices(len(radii), k=1)
    touching = radii[first] + radii[second]

    for _ in range(max_sweeps):
        offsets = centers[first] - centers[second]
        gaps = np.linalg.norm(offsets, axis=1)
        overlap = touching - gaps
        clash = overlap > tol
        if not clash.any():
            break

        a, b = first[clash], second[clash]
        gap = gaps[clash]
        direction = np.zeros((len(a), 2))
        apart = gap >= 1e-12
        direction[apart] = offsets[clash][apart] / gap[apart, None]
        # coincident centres: separate along x
        direction[~apart, 0] = 1.0

        push = overlap[clash] + tol
        share_a = mobility[a] / (mobility[a] + mobility[b])
        np.add.at(centers, a, (share_a * push)[:, None] * direction)
        np.add.at(centers, b, -((1.0 - share_a) * push)[:, None] * direction)

    return centers


# ---------------- public entry point ----------------


def pack_siblings(
    radii: Sequence[float], max_push_apart: int = 1000
) -> Tuple[np.ndarray, float]:
    """
    Pack circles of the given radii, in the given order, without overlaps.

    Parameters
    ----------
    radii : (n,) floats
        Circle radii, >= 0. The order matters: earlier circles sit closer to the centre,
        so callers sort by size first.
    max_push_apart : int
        Sibling sets up to this size get the all-pairs separation pass.

    Returns
    -------
    centers : (n, 2) array
        Centres relative to the centre of the enclosing circle.
    enclosing_radius : float
    """
    r = np.asarray(radii, float)
    n = len(r)
    if n == 0:
        return np.empty((0, 2), float), 0.0
    if n == 1:
        return np.zeros((1, 2), float), float(r[0])

    xs, ys, _ = _front_chain_2d(r.tolist())
    P = np.stack([xs, ys], axis=1)

    if n <= max_push_apart:
        P = _push_apart_siblings(P, r)

    ex, ey, er = enclose_circles(P, r)
    P = P - np.array([ex, ey])
    return P, float(er)
