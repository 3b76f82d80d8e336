type BasisPoints = int
type ChainId = int
type Tick = int
type Wei = int
